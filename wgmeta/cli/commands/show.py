"""wg-meta show 命令实现

列出接口及其 section（标识、类型、名称、别名、启用状态）。
"""

from typing import Any, List, Optional

import click

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.exceptions import WGMetaException
from wgmeta.core.logger import get_logger
from wgmeta.cli.utils import OutputFormatter, FormatterConfig, build_store, to_json

logger = get_logger("show_command")

HEADERS = ["Identifier", "Type", "Name", "Alias", "State"]


class ShowCommand:
    """show 命令处理器"""

    def __init__(self, store: ConfigStore, formatter: Optional[OutputFormatter] = None):
        self.store = store
        self.formatter = formatter or OutputFormatter()

    def section_rows(self, interface: str) -> List[List[Any]]:
        """一个接口的表格行，按文件中的顺序"""
        rows = []
        for identifier in self.store.get_section_list(interface):
            section = self.store.get_section(interface, identifier)
            rows.append([
                identifier,
                section.type.value,
                section.name or "",
                section.alias or "",
                "disabled" if section.is_disabled else "enabled",
            ])
        return rows

    def interfaces(self, interface: Optional[str] = None) -> List[str]:
        if interface is None:
            return self.store.get_interface_list()
        return [interface] if interface in self.store.get_interface_list() else []

    def execute(self, interface: Optional[str] = None, as_json: bool = False) -> str:
        """生成输出文本"""
        names = self.interfaces(interface)
        logger.debug("Showing interfaces", interfaces=names)

        if as_json:
            data = self.store.to_dict()
            return to_json({name: data[name] for name in names})

        if not names:
            return self.formatter.warning(f"No interface `{interface}` found")

        blocks = []
        for name in names:
            title = self.formatter.info(f"interface: {name}")
            blocks.append(title + "\n" + self.formatter.format_table(HEADERS, self.section_rows(name)))
        return "\n\n".join(blocks)


@click.command()
@click.argument("interface", required=False)
@click.option("--json", "as_json", is_flag=True, help="以 JSON 格式输出")
@click.pass_context
def show(ctx: click.Context, interface: Optional[str], as_json: bool) -> None:
    """显示接口及其 section

    \b
    使用示例:
    wg-meta show            # 所有接口
    wg-meta show wg0        # 单个接口
    wg-meta show --json
    """
    formatter = OutputFormatter(FormatterConfig(no_color=ctx.obj.get('no_color', False)))
    try:
        store = build_store(ctx.obj['settings'], ctx.obj.get('wireguard_home'))
        click.echo(ShowCommand(store, formatter).execute(interface, as_json))
    except WGMetaException as e:
        click.echo(formatter.error(e.message), err=True)
        raise SystemExit(1)
