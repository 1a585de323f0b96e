"""配置解析器

逐行读取一个接口的配置文件，构建保持原始顺序的 InterfaceConfig。
Interface section 的标识是接口名（来自文件名），Peer section 的标识是其 PublicKey。
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from wgmeta.core.checksum import compute_checksum, parse_checksum, verify_checksum
from wgmeta.core.data_structures import Entry, InterfaceConfig, Section, SectionType, normalize_key
from wgmeta.core.exceptions import (
    AliasAlreadyExistsError,
    AttributeWithoutSectionError,
    ConfigIOError,
    DuplicateAliasError,
    DuplicateIdentifierError,
    EmptyConfigError,
    EmptySectionError,
    InvalidSectionError,
    MalformedLineError,
    NoConfigFilesError,
    SectionWithoutIdentifierError,
)
from wgmeta.core.line_classifier import ClassifiedLine, LineKind, classify_line, split_and_trim
from wgmeta.core.logger import OperationScope, get_logger
from wgmeta.core.serializer import create_wg_config

logger = get_logger("parser")

CONFIG_SUFFIX = ".conf"


class SectionParser:
    """单个配置文件的状态机解析器

    用法::

        parser = SectionParser("wg0", "#+", "#-")
        for line in lines:
            parser.feed(line)
        config = parser.finish()
    """

    def __init__(self, interface: str, meta_prefix: str, disabled_prefix: str, source: Optional[str] = None):
        self.interface = interface
        self.meta_prefix = meta_prefix
        self.disabled_prefix = disabled_prefix
        self.source = source or f"{interface}{CONFIG_SUFFIX}"
        self.config = InterfaceConfig(name=interface)
        self.line_number = 0

        # 是否已经读到第一个 section 头
        self._init_done = False
        self._section_type: Optional[SectionType] = None
        self._section_disabled = False
        self._entries: List[Entry] = []
        self._has_attributes = False
        self._identifier: Optional[str] = None
        self._pending_alias: Optional[str] = None

    def _details(self, **kwargs) -> Dict[str, object]:
        details = {"path": self.source, "line_number": self.line_number}
        details.update(kwargs)
        return details

    def feed(self, line: str) -> None:
        """处理一行输入"""
        self.line_number += 1
        classified = classify_line(line, self.meta_prefix, self.disabled_prefix)

        if classified.kind is LineKind.EMPTY:
            return
        if classified.kind is LineKind.SECTION:
            self._on_section(classified)
        elif classified.kind is LineKind.COMMENT:
            self._on_comment(classified.text)
        elif classified.kind is LineKind.META:
            self._on_meta(classified.text)
        else:
            self._on_plain(classified.text)

    def finish(self) -> InterfaceConfig:
        """结束输入，提交最后一个 section 并返回结果

        Raises:
            EmptyConfigError: 文件中没有任何 section
        """
        if not self._init_done:
            raise EmptyConfigError(
                f"No section found in `{self.source}`",
                details={"path": self.source},
            )
        self._close_section()
        return self.config

    def _on_section(self, classified: ClassifiedLine) -> None:
        header = classified.text.strip("[]").strip()
        section_type = SectionType.from_header(header)
        if section_type is None:
            raise InvalidSectionError(
                f"Invalid section found: {header}",
                details=self._details(section=header),
            )

        if self._init_done:
            self._close_section()

        self._init_done = True
        self._section_type = section_type
        self._section_disabled = classified.disabled

    def _on_comment(self, text: str) -> None:
        # 第一个 section 之前的注释属于文件头，写回时会重新生成
        if not self._init_done:
            return
        self._entries.append(Entry.comment(text))

    def _on_meta(self, text: str) -> None:
        try:
            name, value = split_and_trim(text)
        except ValueError:
            # 没有 `=` 的元数据前缀行按普通注释处理
            self._on_comment(text)
            return

        key = normalize_key(name[len(self.meta_prefix):])

        if not self._init_done:
            if key == "Checksum":
                self.config.checksum = parse_checksum(value)
            return

        if key == "Alias":
            if value in self.config.aliases:
                raise DuplicateAliasError(
                    f"Alias `{value}` already exists, aborting",
                    details=self._details(alias=value),
                )
            self._pending_alias = value

        self._has_attributes = True
        self._entries.append(Entry.meta(key, value))

    def _on_plain(self, text: str) -> None:
        if not self._init_done:
            raise AttributeWithoutSectionError(
                "Attribute without a section encountered, aborting",
                details=self._details(line=text),
            )
        try:
            name, value = split_and_trim(text)
        except ValueError:
            raise MalformedLineError(
                f"Expected `key = value`, got `{text}`",
                details=self._details(line=text),
            ) from None

        key = normalize_key(name)
        if key == self._section_type.identifying_attribute:
            if self._section_type is SectionType.INTERFACE:
                self._identifier = self.interface
            else:
                self._identifier = value

        self._has_attributes = True
        self._entries.append(Entry.plain(key, value))

    def _close_section(self) -> None:
        if not self._has_attributes:
            raise EmptySectionError(
                "Found empty section, aborting",
                details=self._details(section=self._section_type.value),
            )
        if self._identifier is None:
            raise SectionWithoutIdentifierError(
                "Section without identifying information found (PrivateKey or PublicKey field)",
                details=self._details(section=self._section_type.value),
            )
        if self.config.has_section(self._identifier):
            raise DuplicateIdentifierError(
                f"Section `{self._identifier}` defined twice",
                details=self._details(identifier=self._identifier),
            )

        section = Section(
            identifier=self._identifier,
            type=self._section_type,
            entries=self._entries,
            disabled_prefixed=self._section_disabled,
        )
        self.config.add_section(section)

        if self._pending_alias is not None:
            try:
                self.config.aliases.bind(self._pending_alias, self._identifier)
            except AliasAlreadyExistsError as e:
                raise DuplicateAliasError(e.message, details=self._details(alias=self._pending_alias)) from e

        self._section_type = None
        self._section_disabled = False
        self._entries = []
        self._has_attributes = False
        self._identifier = None
        self._pending_alias = None


def parse_wg_config(
    content: Union[str, Iterable[str]],
    interface: str,
    meta_prefix: str = "#+",
    disabled_prefix: str = "#-",
    source: Optional[str] = None,
) -> InterfaceConfig:
    """解析一个接口的配置文本

    Args:
        content: 完整文本或行的可迭代对象
        interface: 接口名，即 Interface section 的标识
        meta_prefix: 元数据前缀
        disabled_prefix: 禁用前缀
        source: 出错时报告的来源

    Raises:
        ParseError: 解析失败
    """
    lines = content.splitlines() if isinstance(content, str) else content
    parser = SectionParser(interface, meta_prefix, disabled_prefix, source)
    for line in lines:
        parser.feed(line)
    return parser.finish()


def interface_name_from_path(path: Path) -> str:
    """`/etc/wireguard/wg0.conf` -> `wg0`"""
    return Path(path).name[:-len(CONFIG_SUFFIX)]


def list_config_files(wireguard_home: Path) -> List[Path]:
    """列出目录中的 *.conf 文件（按名称排序）

    Raises:
        ConfigIOError: 目录不存在或不可读
    """
    home = Path(wireguard_home)
    if not home.is_dir():
        raise ConfigIOError(
            f"Wireguard home `{home}` is not a directory",
            details={"path": str(home)},
        )
    try:
        return sorted(p for p in home.glob(f"*{CONFIG_SUFFIX}") if p.is_file())
    except OSError as e:
        raise ConfigIOError(f"Could not list `{home}`: {e}", details=str(e)) from e


def read_wg_config(path: Path, meta_prefix: str, disabled_prefix: str) -> InterfaceConfig:
    """读取并解析单个配置文件，同时校验文件头中的校验和

    Raises:
        ConfigIOError: 文件不可读
        ParseError: 解析失败
    """
    path = Path(path)
    interface = interface_name_from_path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = parse_wg_config(f, interface, meta_prefix, disabled_prefix, source=str(path))
    except OSError as e:
        logger.error("Could not open config file", path=str(path), error=str(e))
        raise ConfigIOError(f"Could not open config file at {path}", details=str(e)) from e

    body = create_wg_config(config, meta_prefix, disabled_prefix, plain=True)
    verify_checksum(interface, config.checksum, compute_checksum(body))

    logger.debug(
        "Config parsed",
        interface=interface,
        sections=len(config.section_order),
        aliases=len(config.aliases),
    )
    return config


def read_wg_configs(wireguard_home: Path, meta_prefix: str, disabled_prefix: str) -> Dict[str, InterfaceConfig]:
    """解析目录中所有接口配置

    Returns:
        接口名 -> InterfaceConfig，顺序与文件名排序一致

    Raises:
        NoConfigFilesError: 目录中没有 *.conf 文件
        ConfigIOError: 目录或文件不可读
        ParseError: 任一文件解析失败
    """
    with OperationScope("read_wg_configs", context={"wireguard_home": str(wireguard_home)}, logger=logger):
        config_files = list_config_files(wireguard_home)
        if not config_files:
            raise NoConfigFilesError(
                f"No matching interface configuration(s) in {wireguard_home}",
                details={"path": str(wireguard_home)},
            )

        return {
            interface_name_from_path(path): read_wg_config(path, meta_prefix, disabled_prefix)
            for path in config_files
        }
