"""wg-meta enable / disable 命令实现

禁用的 section 在写回时整段被注释掉，wg-quick 不再加载它。
"""

import warnings

import click

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.exceptions import IntegrityWarning, WGMetaException
from wgmeta.cli.utils import OutputFormatter, FormatterConfig, build_store, commit_store


class ToggleCommand:
    """enable / disable 命令处理器"""

    def __init__(self, store: ConfigStore):
        self.store = store

    def execute(self, interface: str, identifier: str, disable: bool, by_alias: bool = False) -> None:
        """切换 section 状态

        Raises:
            ValidationError: 接口、标识或别名无效
        """
        if by_alias:
            action = self.store.disable_by_alias if disable else self.store.enable_by_alias
        else:
            action = self.store.disable if disable else self.store.enable
        action(interface, identifier)


def _run(ctx: click.Context, interface: str, identifier: str, by_alias: bool, disable: bool) -> None:
    formatter = OutputFormatter(FormatterConfig(no_color=ctx.obj.get('no_color', False)))
    try:
        store = build_store(ctx.obj['settings'], ctx.obj.get('wireguard_home'))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", IntegrityWarning)
            ToggleCommand(store).execute(interface, identifier, disable, by_alias)
        for warning in caught:
            click.echo(formatter.warning(str(warning.message)), err=True)
        for path in commit_store(store, ctx.obj.get('dry_run', False)):
            click.echo(formatter.success(f"Written {path}"))
    except WGMetaException as e:
        click.echo(formatter.error(e.message), err=True)
        raise SystemExit(1)


@click.command()
@click.argument("interface")
@click.argument("identifier")
@click.option("-a", "--alias", "by_alias", is_flag=True, help="IDENTIFIER 是别名")
@click.pass_context
def enable(ctx: click.Context, interface: str, identifier: str, by_alias: bool) -> None:
    """启用 section"""
    _run(ctx, interface, identifier, by_alias, disable=False)


@click.command()
@click.argument("interface")
@click.argument("identifier")
@click.option("-a", "--alias", "by_alias", is_flag=True, help="IDENTIFIER 是别名")
@click.pass_context
def disable(ctx: click.Context, interface: str, identifier: str, by_alias: bool) -> None:
    """禁用 section（整段注释掉）"""
    _run(ctx, interface, identifier, by_alias, disable=True)
