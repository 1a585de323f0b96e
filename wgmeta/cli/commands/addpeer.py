"""wg-meta addpeer 命令实现

为接口添加新的 Peer：生成密钥对，写入服务端配置，并输出可直接使用的客户端配置。
"""

from typing import Optional

import click

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.exceptions import ValidationError, WGMetaException
from wgmeta.core.logger import get_logger
from wgmeta.core.wg_client import WireguardClient
from wgmeta.cli.utils import OutputFormatter, FormatterConfig, build_store, commit_store

logger = get_logger("addpeer_command")

CLIENT_CONFIG_TEMPLATE = """# generated by wg-meta
[Interface]
{meta_prefix}Name = {name}
Address = {address}
PrivateKey = {private_key}

[Peer]
PublicKey = {interface_public_key}
AllowedIPs = 0.0.0.0/0, ::/0
Endpoint = <replace-with-your-fqdn-or-ip>:{listen_port}
"""


class AddPeerCommand:
    """addpeer 命令处理器"""

    def __init__(self, store: ConfigStore, wg_client: Optional[WireguardClient] = None):
        self.store = store
        self.wg_client = wg_client or store.wg_client

    def execute(self, interface: str, name: str, address: str, alias: Optional[str] = None) -> str:
        """添加 Peer 并返回客户端配置

        Raises:
            ValidationError: 接口无效或别名已存在
            WireguardCommandError: 密钥生成失败
        """
        private_key, public_key = self.wg_client.gen_keypair()
        interface_private_key = self.store.add_peer(interface, name, address, public_key, alias=alias)
        if interface_private_key is None:
            raise ValidationError(
                f"Interface `{interface}` has no [Interface] section with a PrivateKey",
                details={"interface": interface},
            )

        interface_section = self.store.get_section(interface, interface)
        listen_port = interface_section.get_attribute("ListenPort") or "<listen-port>"

        logger.info("Peer generated", interface=interface, alias=alias)
        return CLIENT_CONFIG_TEMPLATE.format(
            meta_prefix=self.store.get_wg_meta_prefix(),
            name=name,
            address=address,
            private_key=private_key,
            interface_public_key=self.wg_client.pubkey(interface_private_key),
            listen_port=listen_port,
        )


@click.command()
@click.argument("interface")
@click.argument("name")
@click.argument("address")
@click.argument("alias", required=False)
@click.pass_context
def addpeer(ctx: click.Context, interface: str, name: str, address: str, alias: Optional[str]) -> None:
    """添加 Peer 并输出客户端配置

    \b
    使用示例:
    wg-meta addpeer wg0 bob 10.0.0.5/32
    wg-meta addpeer wg0 bob 10.0.0.5/32 bobs-phone
    """
    formatter = OutputFormatter(FormatterConfig(no_color=ctx.obj.get('no_color', False)))
    try:
        store = build_store(ctx.obj['settings'], ctx.obj.get('wireguard_home'))
        click.echo(AddPeerCommand(store).execute(interface, name, address, alias))
        for path in commit_store(store, ctx.obj.get('dry_run', False)):
            click.echo(formatter.success(f"Written {path}"), err=True)
    except WGMetaException as e:
        click.echo(formatter.error(e.message), err=True)
        raise SystemExit(1)
