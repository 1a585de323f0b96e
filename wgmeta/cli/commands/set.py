"""wg-meta set 命令实现

设置一个 section 的一个或多个属性。元数据属性写入配置文件，
其他属性默认转发给 `wg set`。
"""

from typing import List, Sequence, Tuple

import click

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.exceptions import WGMetaException
from wgmeta.core.logger import get_logger
from wgmeta.cli.utils import OutputFormatter, FormatterConfig, build_store, commit_store

logger = get_logger("set_command")


def pair_arguments(values: Sequence[str]) -> List[Tuple[str, str]]:
    """`(a, 1, b, 2)` -> `[(a, 1), (b, 2)]`

    Raises:
        click.BadParameter: 参数个数为奇数
    """
    if not values or len(values) % 2:
        raise click.BadParameter("expected ATTRIBUTE VALUE pairs", param_hint="ATTRIBUTE VALUE")
    return list(zip(values[0::2], values[1::2]))


class SetCommand:
    """set 命令处理器"""

    def __init__(self, store: ConfigStore):
        self.store = store

    def execute(
        self,
        interface: str,
        identifier: str,
        pairs: List[Tuple[str, str]],
        by_alias: bool = False,
        allow_non_meta: bool = False,
    ) -> str:
        """依次设置所有属性，返回实际修改的 section 标识

        Raises:
            ValidationError: 接口、标识或别名无效
            WireguardException: 转发给 wg set 失败
        """
        if by_alias:
            identifier = self.store.translate_alias(interface, identifier)

        for attribute, value in pairs:
            # 修改 Peer 的 PublicKey 会改变标识，后续属性作用于新标识
            identifier = self.store.set(interface, identifier, attribute, value, allow_non_meta=allow_non_meta)

        logger.info("Attributes set", interface=interface, count=len(pairs))
        return identifier


@click.command(name="set")
@click.argument("interface")
@click.argument("identifier")
@click.argument("pairs", nargs=-1, required=True)
@click.option("-a", "--alias", "by_alias", is_flag=True, help="IDENTIFIER 是别名")
@click.option("--allow-non-meta", is_flag=True, help="非元数据属性直接写入配置文件，不转发给 wg set")
@click.pass_context
def set_cmd(
    ctx: click.Context,
    interface: str,
    identifier: str,
    pairs: Tuple[str, ...],
    by_alias: bool,
    allow_non_meta: bool,
) -> None:
    """设置 section 属性

    \b
    使用示例:
    wg-meta set wg0 <public-key> name "Fancy name" alias phone
    wg-meta set wg0 phone disabled 1 --alias
    wg-meta set wg0 wg0 ListenPort 51821
    """
    formatter = OutputFormatter(FormatterConfig(no_color=ctx.obj.get('no_color', False)))
    attribute_pairs = pair_arguments(pairs)
    try:
        store = build_store(ctx.obj['settings'], ctx.obj.get('wireguard_home'))
        SetCommand(store).execute(interface, identifier, attribute_pairs, by_alias, allow_non_meta)
        for path in commit_store(store, ctx.obj.get('dry_run', False)):
            click.echo(formatter.success(f"Written {path}"))
    except WGMetaException as e:
        click.echo(formatter.error(e.message), err=True)
        raise SystemExit(1)
