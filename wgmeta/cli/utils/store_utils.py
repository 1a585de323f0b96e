"""从 CLI 上下文构建 ConfigStore 并提交修改"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.logger import get_logger
from wgmeta.core.wg_client import WireguardClient

logger = get_logger("store_utils")


def build_store(settings: Dict[str, Any], wireguard_home: Optional[str] = None) -> ConfigStore:
    """根据设置创建 ConfigStore

    Args:
        settings: SettingsManager.load_settings() 的结果
        wireguard_home: 命令行指定的目录，优先于设置

    Raises:
        ParseError / ConfigIOError: 配置加载失败
    """
    home = wireguard_home or settings["wireguard_home"]
    return ConfigStore(
        Path(home),
        wg_meta_prefix=settings["wg_meta_prefix"],
        disabled_prefix=settings["disabled_prefix"],
        additional_attributes=settings.get("additional_attributes") or None,
        wg_client=WireguardClient(settings.get("wg_binary", "wg")),
    )


def commit_store(store: ConfigStore, dry_run: bool) -> List[Path]:
    """有修改时写回配置，返回写入的文件"""
    if not store.has_changed:
        logger.debug("Nothing to commit")
        return []
    return store.commit(overwrite=not dry_run)
