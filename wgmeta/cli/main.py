"""wg-meta CLI 主入口"""

import sys
from pathlib import Path
from typing import Optional

import click

from wgmeta.cli.commands.addpeer import addpeer
from wgmeta.cli.commands.set import set_cmd
from wgmeta.cli.commands.show import show
from wgmeta.cli.commands.toggle import disable, enable
from wgmeta.core.exceptions import WGMetaException
from wgmeta.core.logger import LoggerConfig, configure_logger
from wgmeta.core.settings_manager import SettingsManager

__version__ = "0.1.0"


@click.group()
@click.version_option(version=__version__, prog_name="wg-meta")
@click.option('--verbose', is_flag=True, help='详细日志输出（调试用）')
@click.option('--no-color', is_flag=True, help='关闭彩色输出')
@click.option('--log-json', is_flag=True, help='日志以 JSON 格式输出')
@click.option(
    '--settings',
    'settings_path',
    type=click.Path(dir_okay=False, path_type=Path),
    envvar='WG_META_SETTINGS',
    help='设置文件路径（默认 /etc/wireguard/wg-meta.yaml）',
)
@click.option(
    '--wireguard-home',
    type=click.Path(file_okay=False, path_type=Path),
    help='wireguard 配置目录，优先于设置文件和 WIREGUARD_HOME',
)
@click.option('--dry-run', is_flag=True, help='写入 <接口>.conf_dryrun 而不是覆盖原配置')
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    no_color: bool,
    log_json: bool,
    settings_path: Optional[Path],
    wireguard_home: Optional[Path],
    dry_run: bool,
):
    """wg-meta - 带元数据的 wireguard 配置管理

    在 wireguard 配置文件中以注释形式保存名称、别名和启用状态，
    配置对 wg / wg-quick 保持完全兼容。

    \b
    命令：
      show [interface]                          显示接口和 peer
      set <interface> <identifier> <attr> <v>   设置属性
      enable <interface> <identifier>           启用 section
      disable <interface> <identifier>          禁用 section
      addpeer <interface> <name> <ip> [alias]   添加 peer
    """
    settings = SettingsManager(settings_path).load_settings()

    level = "DEBUG" if verbose else settings["logging"]["level"]
    configure_logger(LoggerConfig(
        level=level,
        json_output=log_json or settings["logging"]["json"],
        console_output=verbose,
    ))

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings
    ctx.obj['verbose'] = verbose
    ctx.obj['no_color'] = no_color
    ctx.obj['dry_run'] = dry_run
    ctx.obj['wireguard_home'] = str(wireguard_home) if wireguard_home else None


cli.add_command(show)
cli.add_command(set_cmd, name="set")
cli.add_command(enable)
cli.add_command(disable)
cli.add_command(addpeer)


def main():
    """CLI 入口点，处理全局异常"""
    try:
        cli()
    except WGMetaException as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
