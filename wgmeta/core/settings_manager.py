"""设置管理器

加载 wg-meta.yaml 设置文件（wireguard 目录、前缀、额外元数据属性、日志），
与默认值深度合并并验证，环境变量优先于文件。
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from wgmeta.core.exceptions import SettingsIOError, SettingsParseError, SettingsValidationError
from wgmeta.core.logger import get_logger

logger = get_logger("settings_manager")

DEFAULT_SETTINGS_PATH = Path("/etc/wireguard/wg-meta.yaml")

# 环境变量 -> 设置键
ENV_OVERRIDES = {
    "WIREGUARD_HOME": "wireguard_home",
    "WG_META_PREFIX": "wg_meta_prefix",
    "WG_META_DISABLED_PREFIX": "disabled_prefix",
}


class SettingsManager:
    """设置管理器

    负责加载和验证 wg-meta.yaml。
    """

    DEFAULT_SETTINGS = {
        "wireguard_home": "/etc/wireguard",
        "wg_meta_prefix": "#+",
        "disabled_prefix": "#-",
        "additional_attributes": [],
        "wg_binary": "wg",
        "logging": {
            "level": "WARNING",
            "json": False,
        },
    }

    def __init__(self, settings_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """初始化设置管理器

        Args:
            settings_path: 设置文件路径，默认读取 WG_META_SETTINGS 或 /etc/wireguard/wg-meta.yaml
            environ: 环境变量映射，默认使用 os.environ
        """
        self.environ = os.environ if environ is None else environ
        if settings_path is None:
            settings_path = self.environ.get("WG_META_SETTINGS") or DEFAULT_SETTINGS_PATH
        self.settings_path = Path(settings_path)

    def get_default_settings(self) -> Dict[str, Any]:
        """默认设置的深拷贝"""
        return copy.deepcopy(self.DEFAULT_SETTINGS)

    def load_settings(self) -> Dict[str, Any]:
        """加载设置文件

        文件不存在或为空时使用默认值。

        Raises:
            SettingsIOError: 文件读取失败
            SettingsParseError: YAML 解析失败
            SettingsValidationError: 设置值无效
        """
        path = self.settings_path
        logger.debug("Loading settings", path=str(path))

        settings = self.get_default_settings()
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                logger.error("Failed to parse YAML settings", path=str(path), error=str(e))
                raise SettingsParseError(f"Failed to parse YAML settings: {e}", details=str(e)) from e
            except OSError as e:
                logger.error("Failed to read settings file", path=str(path), error=str(e))
                raise SettingsIOError(f"Failed to read settings file: {e}", details=str(e)) from e

            if data is not None:
                if not isinstance(data, dict):
                    raise SettingsValidationError("Settings file must contain a mapping")
                settings = merge_settings(settings, data)
        else:
            logger.debug("Settings file not found, using defaults", path=str(path))

        for env_name, key in ENV_OVERRIDES.items():
            if self.environ.get(env_name):
                settings[key] = self.environ[env_name]

        self.validate_settings(settings)
        return settings

    def validate_settings(self, settings: Dict[str, Any]) -> bool:
        """验证设置结构和值

        Raises:
            SettingsValidationError: 验证失败，消息中包含所有错误
        """
        errors = []

        for key in ("wireguard_home", "wg_meta_prefix", "disabled_prefix", "wg_binary"):
            if not isinstance(settings.get(key), str) or not settings.get(key):
                errors.append(f"{key} must be a non-empty string")

        for key in ("wg_meta_prefix", "disabled_prefix"):
            value = settings.get(key)
            if isinstance(value, str) and not value.startswith(("#", ";")):
                errors.append(f"{key} has to begin with either `#` or `;`")

        if settings.get("wg_meta_prefix") == settings.get("disabled_prefix"):
            errors.append("wg_meta_prefix and disabled_prefix have to be different")

        attributes = settings.get("additional_attributes")
        if not isinstance(attributes, list) or not all(isinstance(a, str) for a in attributes):
            errors.append("additional_attributes must be a list of strings")

        logging_settings = settings.get("logging")
        if not isinstance(logging_settings, dict):
            errors.append("logging must be a dictionary")
        else:
            if str(logging_settings.get("level", "WARNING")).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
                errors.append("logging.level must be one of DEBUG, INFO, WARNING, ERROR")
            if not isinstance(logging_settings.get("json", False), bool):
                errors.append("logging.json must be a boolean")

        if errors:
            logger.error("Settings validation failed", errors=errors)
            raise SettingsValidationError(f"Settings validation failed: {'; '.join(errors)}")
        return True


def merge_settings(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """深度合并：字典递归合并，其他值（包括列表）由 override 覆盖"""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_settings(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result
