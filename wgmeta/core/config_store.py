"""wg-meta 配置存储

加载 wireguard 目录中的所有接口配置，提供查询、修改、启用/禁用、添加接口和 Peer 的操作，
并通过 commit 写回磁盘。元数据属性（Name、Alias、Disabled 等）以注释形式保存，
对 wg / wg-quick 不可见；其他属性默认转发给 `wg set`。

示例::

    store = ConfigStore("/etc/wireguard")
    store.set("wg0", "WG_0_PEER_A_PUBLIC_KEY", "alias", "some_fancy_alias")
    store.disable_by_alias("wg0", "some_fancy_alias")
    store.commit(overwrite=False)   # 写入 wg0.conf_dryrun
"""

import os
import shutil
import tempfile
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from wgmeta.core.checksum import compute_checksum
from wgmeta.core.data_structures import (
    Entry,
    InterfaceConfig,
    Section,
    SectionType,
    normalize_key,
)
from wgmeta.core.exceptions import (
    AliasAlreadyExistsError,
    ConfigIOError,
    IdentifierAlreadyExistsError,
    IntegrityWarning,
    InterfaceAlreadyExistsError,
    InvalidIdentifierError,
    InvalidInterfaceError,
)
from wgmeta.core.line_classifier import validate_prefixes
from wgmeta.core.logger import OperationScope, get_logger
from wgmeta.core.parser import CONFIG_SUFFIX, read_wg_configs
from wgmeta.core.serializer import create_wg_config
from wgmeta.core.wg_client import WireguardClient

logger = get_logger("config_store")

DEFAULT_META_PREFIX = "#+"
DEFAULT_DISABLED_PREFIX = "#-"
DEFAULT_META_ATTRIBUTES = ("Name", "Alias", "Disabled")
DRY_RUN_SUFFIX = "_dryrun"


class ConfigStore:
    """wireguard 配置文件的包装类"""

    def __init__(
        self,
        wireguard_home: Union[str, Path],
        wg_meta_prefix: str = DEFAULT_META_PREFIX,
        disabled_prefix: str = DEFAULT_DISABLED_PREFIX,
        additional_attributes: Optional[Iterable[str]] = None,
        wg_client: Optional[WireguardClient] = None,
        load: bool = True,
    ):
        """初始化配置存储

        Args:
            wireguard_home: wireguard 配置目录
            wg_meta_prefix: 元数据前缀，必须以 `#` 或 `;` 开头
            disabled_prefix: 禁用前缀，必须以 `#` 或 `;` 开头且与 wg_meta_prefix 不同
            additional_attributes: 额外的元数据属性名，与默认的 Name、Alias、Disabled 合并
            wg_client: 用于转发非元数据属性的 wg 客户端
            load: 为 False 时不读取目录，从空配置开始（之后可用 add_interface）

        Raises:
            InvalidPrefixError: 前缀无效
            ParseError: 任一配置文件解析失败
            ConfigIOError: 目录或文件不可读
        """
        validate_prefixes(wg_meta_prefix, disabled_prefix)

        self.wireguard_home = Path(wireguard_home)
        self.wg_meta_prefix = wg_meta_prefix
        self.disabled_prefix = disabled_prefix
        self.wg_client = wg_client or WireguardClient()
        self.valid_attributes = set(DEFAULT_META_ATTRIBUTES)
        for attribute in additional_attributes or ():
            self.valid_attributes.add(normalize_key(attribute))

        self._has_changed = False
        self._interfaces: Dict[str, InterfaceConfig] = {}
        if load:
            self._interfaces = read_wg_configs(self.wireguard_home, wg_meta_prefix, disabled_prefix)

        logger.info(
            "ConfigStore initialized",
            wireguard_home=str(self.wireguard_home),
            interfaces=len(self._interfaces),
        )

    @property
    def has_changed(self) -> bool:
        """是否有尚未写回的修改"""
        return self._has_changed

    def get_wg_meta_prefix(self) -> str:
        return self.wg_meta_prefix

    def get_disabled_prefix(self) -> str:
        return self.disabled_prefix

    def is_meta_attribute(self, attribute: str) -> bool:
        return normalize_key(attribute) in self.valid_attributes

    # 查询

    def get_interface_list(self) -> List[str]:
        """所有接口名"""
        return list(self._interfaces)

    def get_section_list(self, interface: str) -> List[str]:
        """接口中所有 section 的标识（保持文件中的顺序），接口不存在时返回空列表"""
        config = self._interfaces.get(interface)
        if config is None:
            return []
        return list(config.section_order)

    def get_section(self, interface: str, identifier: str) -> Optional[Section]:
        """返回 section 的副本，接口或标识不存在时返回 None"""
        config = self._interfaces.get(interface)
        if config is None or not config.has_section(identifier):
            return None
        return config.sections[identifier].copy()

    def get_interface(self, interface: str) -> Optional[InterfaceConfig]:
        """返回接口配置的副本，接口不存在时返回 None"""
        config = self._interfaces.get(interface)
        if config is None:
            return None
        return _copy_interface(config)

    def translate_alias(self, interface: str, alias: str) -> str:
        """将别名翻译为标识

        Raises:
            InvalidInterfaceError: 接口不存在
            InvalidAliasError: 别名不存在
        """
        return self._get_interface(interface).aliases.resolve(alias)

    def render(self, interface: str, plain: bool = False) -> str:
        """序列化单个接口"""
        return create_wg_config(
            self._get_interface(interface),
            self.wg_meta_prefix,
            self.disabled_prefix,
            plain=plain,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: config.to_dict(self.wg_meta_prefix)
            for name, config in self._interfaces.items()
        }

    # 修改

    def set(
        self,
        interface: str,
        identifier: str,
        attribute: str,
        value: Any,
        allow_non_meta: bool = False,
    ) -> str:
        """设置 section 的属性

        元数据属性直接写入模型。其他属性默认转发给 `wg set` 而不修改文件；
        `allow_non_meta` 为 True 时直接写入文件（不做任何校验）。

        Args:
            interface: 接口名（例如 `wg0`）
            identifier: Peer 的公钥，或 Interface 的接口名
            attribute: 属性名（大小写不敏感）
            value: 属性值
            allow_non_meta: 是否允许直接写入非元数据属性

        Returns:
            修改后 section 的标识（修改 Peer 的 PublicKey 时为新公钥）

        Raises:
            InvalidInterfaceError: 接口不存在
            InvalidIdentifierError: 标识不存在
            AliasAlreadyExistsError: 设置的别名已被其他 section 使用
            IdentifierAlreadyExistsError: 修改后的 PublicKey 已被其他 Peer 使用
        """
        config = self._get_interface(interface)
        section = self._get_section(config, identifier)
        attribute = normalize_key(attribute)
        value = str(value)

        if self.is_meta_attribute(attribute):
            if attribute == "Alias":
                self._rebind_alias(config, section, value)
            section.set_meta(attribute, value)
            self._has_changed = True
            logger.info("Metadata attribute set", interface=interface, identifier=identifier, attribute=attribute)
            return section.identifier

        if not allow_non_meta:
            self.wg_client.set_attribute(
                interface,
                identifier,
                attribute,
                value,
                is_peer=section.type is SectionType.PEER,
            )
            return section.identifier

        if section.type is SectionType.PEER and attribute == SectionType.PEER.identifying_attribute:
            self._rekey_peer(config, section, value)
        section.set_attribute(attribute, value)
        self._has_changed = True
        logger.info("Attribute set", interface=interface, identifier=section.identifier, attribute=attribute)
        return section.identifier

    def set_by_alias(
        self,
        interface: str,
        alias: str,
        attribute: str,
        value: Any,
        allow_non_meta: bool = False,
    ) -> str:
        """与 set 相同，但通过别名定位 section"""
        identifier = self.translate_alias(interface, alias)
        return self.set(interface, identifier, attribute, value, allow_non_meta)

    def enable(self, interface: str, identifier: str) -> None:
        """启用 section"""
        self._toggle(interface, identifier, disable=False)

    def disable(self, interface: str, identifier: str) -> None:
        """禁用 section（写回时整段被注释掉）"""
        self._toggle(interface, identifier, disable=True)

    def enable_by_alias(self, interface: str, alias: str) -> None:
        self._toggle(interface, self.translate_alias(interface, alias), disable=False)

    def disable_by_alias(self, interface: str, alias: str) -> None:
        self._toggle(interface, self.translate_alias(interface, alias), disable=True)

    def add_interface(self, interface: str, address: str, listen_port: Any, private_key: str) -> None:
        """添加一个最小配置的接口，其他属性可之后通过 set 设置

        Raises:
            InterfaceAlreadyExistsError: 接口名已存在
        """
        if interface in self._interfaces:
            raise InterfaceAlreadyExistsError(
                f"Interface `{interface}` already exists",
                details={"interface": interface},
            )

        config = InterfaceConfig(name=interface)
        config.add_section(Section(
            identifier=interface,
            type=SectionType.INTERFACE,
            entries=[
                Entry.plain("Address", address),
                Entry.plain("ListenPort", str(listen_port)),
                Entry.plain("PrivateKey", private_key),
            ],
        ))
        self._interfaces[interface] = config
        self._has_changed = True
        logger.info("Interface added", interface=interface)

    def add_peer(
        self,
        interface: str,
        name: str,
        address: str,
        public_key: str,
        alias: Optional[str] = None,
        preshared_key: Optional[str] = None,
    ) -> Optional[str]:
        """向已有接口添加 Peer

        Args:
            interface: 接口名
            name: Peer 名称（元数据）
            address: Peer 的 AllowedIPs
            public_key: Peer 公钥，同时作为标识
            alias: 可选别名（元数据）
            preshared_key: 可选预共享密钥

        Returns:
            接口的私钥（用于推导接口公钥），接口没有 Interface section 时返回 None

        Raises:
            InvalidInterfaceError: 接口不存在
            IdentifierAlreadyExistsError: 公钥已被其他 section 使用
            AliasAlreadyExistsError: 别名已被使用
        """
        config = self._get_interface(interface)
        if config.has_section(public_key):
            raise IdentifierAlreadyExistsError(
                f"A section with this public-key already exists on `{interface}`",
                details={"interface": interface, "identifier": public_key},
            )
        if alias is not None and alias in config.aliases:
            raise AliasAlreadyExistsError(
                f"Alias `{alias}` is already defined on interface `{interface}`",
                details={"interface": interface, "alias": alias},
            )

        entries = [
            Entry.meta("Name", name),
            Entry.plain("PublicKey", public_key),
            Entry.plain("AllowedIPs", address),
        ]
        if alias is not None:
            entries.append(Entry.meta("Alias", alias))
        if preshared_key is not None:
            entries.append(Entry.plain("PresharedKey", preshared_key))

        config.add_section(Section(identifier=public_key, type=SectionType.PEER, entries=entries))
        if alias is not None:
            config.aliases.bind(alias, public_key)
        self._has_changed = True
        logger.info("Peer added", interface=interface, alias=alias)

        interface_section = config.interface_section
        if interface_section is None:
            return None
        return interface_section.get_attribute("PrivateKey")

    def commit(self, overwrite: bool = False) -> List[Path]:
        """将所有接口写回 wireguard 目录

        Args:
            overwrite: 为 True 时覆盖现有配置；否则写入 `<接口>.conf_dryrun`

        Returns:
            写入的文件路径列表

        Raises:
            ConfigIOError: 目录或文件不可写
        """
        written = []
        with OperationScope("commit", context={"overwrite": overwrite}, logger=logger):
            for interface, config in self._interfaces.items():
                suffix = CONFIG_SUFFIX if overwrite else CONFIG_SUFFIX + DRY_RUN_SUFFIX
                path = self.wireguard_home / f"{interface}{suffix}"
                _write_atomic(path, self.render(interface))
                written.append(path)
                if overwrite:
                    config.checksum = compute_checksum(self.render(interface, plain=True))

        if overwrite:
            self._has_changed = False
        return written

    # 内部方法

    def _get_interface(self, interface: str) -> InterfaceConfig:
        config = self._interfaces.get(interface)
        if config is None:
            raise InvalidInterfaceError(
                f"Invalid interface name `{interface}`",
                details={"interface": interface},
            )
        return config

    def _get_section(self, config: InterfaceConfig, identifier: str) -> Section:
        if not config.has_section(identifier):
            raise InvalidIdentifierError(
                f"Invalid identifier `{identifier}` for interface `{config.name}`",
                details={"interface": config.name, "identifier": identifier},
            )
        return config.sections[identifier]

    def _toggle(self, interface: str, identifier: str, disable: bool) -> None:
        config = self._get_interface(interface)
        section = self._get_section(config, identifier)
        if section.is_disabled == disable:
            state = "disabled" if disable else "enabled"
            logger.warning("Section already in requested state", interface=interface, identifier=identifier, state=state)
            warnings.warn(
                f"Section `{identifier}` in `{interface}` is already {state}",
                IntegrityWarning,
                stacklevel=3,
            )
        self.set(interface, identifier, "Disabled", "1" if disable else "0")

    def _rebind_alias(self, config: InterfaceConfig, section: Section, alias: str) -> None:
        previous = config.aliases.alias_of(section.identifier)
        config.aliases.bind(alias, section.identifier)
        if previous is not None and previous != alias:
            config.aliases.release(previous)

    def _rekey_peer(self, config: InterfaceConfig, section: Section, public_key: str) -> None:
        old = section.identifier
        if public_key == old:
            return
        if config.has_section(public_key):
            raise IdentifierAlreadyExistsError(
                f"A section with this public-key already exists on `{config.name}`",
                details={"interface": config.name, "identifier": public_key},
            )
        del config.sections[old]
        config.sections[public_key] = section
        config.section_order[config.section_order.index(old)] = public_key
        section.identifier = public_key
        for alias, target in config.aliases.items():
            if target == old:
                config.aliases.release(alias)
                config.aliases.bind(alias, public_key)


def _copy_interface(config: InterfaceConfig) -> InterfaceConfig:
    duplicate = InterfaceConfig(
        name=config.name,
        section_order=list(config.section_order),
        sections={identifier: section.copy() for identifier, section in config.sections.items()},
        checksum=config.checksum,
    )
    for alias, identifier in config.aliases.items():
        duplicate.aliases.bind(alias, identifier)
    return duplicate


def _write_atomic(path: Path, content: str) -> None:
    """先写临时文件再替换目标，调用方看不到写了一半的文件

    Raises:
        ConfigIOError: 写入、复制权限或替换失败
    """
    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd = None
            f.write(content)
        # 覆盖已有文件时沿用其权限；新文件保持 mkstemp 的 0600
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
        logger.info("Config written", path=str(path))
    except OSError as e:
        logger.error("Failed to write config file", path=str(path), error=str(e))
        raise ConfigIOError(f"Failed to write config file {path}: {e}", details=str(e)) from e
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
