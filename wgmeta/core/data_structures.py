"""wg-meta 核心数据结构定义

Section 的内容保存为有序的条目序列（元数据属性、普通属性、注释），
序列本身即序列化顺序，不需要额外的排序列表或合成注释键。"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from wgmeta.core.alias_registry import AliasRegistry


TRUE_VALUES = ("1", "true", "yes", "on")


# wg / wg-quick 认识的属性名，大小写不敏感地映射到标准写法
WIREGUARD_ATTRIBUTES = {
    name.lower(): name
    for name in (
        "PrivateKey", "ListenPort", "FwMark", "Address", "DNS", "MTU", "Table",
        "PreUp", "PostUp", "PreDown", "PostDown", "SaveConfig",
        "PublicKey", "PresharedKey", "AllowedIPs", "Endpoint", "PersistentKeepalive",
    )
}


def normalize_key(key: str) -> str:
    """已知的 wireguard 属性返回标准写法（`publickey` -> `PublicKey`），
    其他属性首字母大写，其余保持原样"""
    key = key.strip()
    return WIREGUARD_ATTRIBUTES.get(key.lower(), key[:1].upper() + key[1:])


def is_truthy(value: Optional[str]) -> bool:
    """判断 0/1 形式的布尔值"""
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


class SectionType(Enum):
    """Section 类型"""
    INTERFACE = "Interface"
    PEER = "Peer"

    @property
    def identifying_attribute(self) -> str:
        """用于推断 section 标识的属性"""
        return "PrivateKey" if self is SectionType.INTERFACE else "PublicKey"

    @classmethod
    def from_header(cls, header: str) -> Optional['SectionType']:
        for section_type in cls:
            if section_type.value == header:
                return section_type
        return None


class EntryKind(Enum):
    """Section 条目类型"""
    META = "meta"
    PLAIN = "plain"
    COMMENT = "comment"


@dataclass
class Entry:
    """Section 中的一行内容

    注释条目的 key 为 None，value 保存完整的注释文本。
    """
    kind: EntryKind
    key: Optional[str]
    value: str

    @classmethod
    def meta(cls, key: str, value: str) -> 'Entry':
        return cls(EntryKind.META, key, value)

    @classmethod
    def plain(cls, key: str, value: str) -> 'Entry':
        return cls(EntryKind.PLAIN, key, value)

    @classmethod
    def comment(cls, text: str) -> 'Entry':
        return cls(EntryKind.COMMENT, None, text)


@dataclass
class Section:
    """一个 [Interface] 或 [Peer] 块"""
    identifier: str
    type: SectionType
    entries: List[Entry] = field(default_factory=list)
    # 解析时整段带有禁用前缀（尚未出现过 Disabled 元数据时使用）
    disabled_prefixed: bool = False

    def _find(self, key: str, kind: EntryKind) -> Optional[Entry]:
        for entry in self.entries:
            if entry.kind is kind and entry.key == key:
                return entry
        return None

    def get_meta(self, key: str) -> Optional[str]:
        entry = self._find(key, EntryKind.META)
        return entry.value if entry else None

    def get_attribute(self, key: str) -> Optional[str]:
        entry = self._find(key, EntryKind.PLAIN)
        return entry.value if entry else None

    def set_meta(self, key: str, value: str) -> bool:
        """设置元数据属性，返回是否新增了条目"""
        return self._set(key, value, EntryKind.META)

    def set_attribute(self, key: str, value: str) -> bool:
        """设置普通属性，返回是否新增了条目"""
        return self._set(key, value, EntryKind.PLAIN)

    def _set(self, key: str, value: str, kind: EntryKind) -> bool:
        entry = self._find(key, kind)
        if entry is not None:
            entry.value = value
            return False
        self.entries.append(Entry(kind, key, value))
        return True

    @property
    def attributes(self) -> Iterator[Entry]:
        """所有非注释条目"""
        return (entry for entry in self.entries if entry.kind is not EntryKind.COMMENT)

    @property
    def comments(self) -> List[str]:
        return [entry.value for entry in self.entries if entry.kind is EntryKind.COMMENT]

    @property
    def is_disabled(self) -> bool:
        """Disabled 元数据优先；从未切换过时沿用文件中的禁用前缀"""
        value = self.get_meta("Disabled")
        if value is None:
            return self.disabled_prefixed
        return is_truthy(value)

    @property
    def name(self) -> Optional[str]:
        return self.get_meta("Name")

    @property
    def alias(self) -> Optional[str]:
        return self.get_meta("Alias")

    def copy(self) -> 'Section':
        return copy.deepcopy(self)

    def to_dict(self, meta_prefix: str = "") -> Dict[str, Any]:
        """转换为字典，元数据键带上 `meta_prefix`"""
        order = []
        values: Dict[str, str] = {}
        for entry in self.attributes:
            key = f"{meta_prefix}{entry.key}" if entry.kind is EntryKind.META else entry.key
            order.append(key)
            values[key] = entry.value
        return {
            'identifier': self.identifier,
            'type': self.type.value,
            'disabled': self.is_disabled,
            'order': order,
            'attributes': values,
            'comments': self.comments,
        }


@dataclass
class InterfaceConfig:
    """一个接口（一个 .conf 文件）的完整配置"""
    name: str
    section_order: List[str] = field(default_factory=list)
    sections: Dict[str, Section] = field(default_factory=dict)
    aliases: AliasRegistry = field(default_factory=AliasRegistry)
    # 文件头中记录的校验和；None 表示文件从未由 wg-meta 写入
    checksum: Optional[int] = None

    def __post_init__(self):
        self.aliases.interface = self.name

    def add_section(self, section: Section) -> None:
        self.sections[section.identifier] = section
        self.section_order.append(section.identifier)

    def has_section(self, identifier: str) -> bool:
        return identifier in self.sections

    def iter_sections(self) -> Iterator[Section]:
        for identifier in self.section_order:
            yield self.sections[identifier]

    @property
    def interface_section(self) -> Optional[Section]:
        return self.sections.get(self.name)

    def to_dict(self, meta_prefix: str = "") -> Dict[str, Any]:
        return {
            'name': self.name,
            'checksum': self.checksum,
            'section_order': list(self.section_order),
            'alias_map': self.aliases.to_dict(),
            'sections': {
                identifier: self.sections[identifier].to_dict(meta_prefix)
                for identifier in self.section_order
            },
        }

