"""行分类器

将配置文件中的单行归类为 空行 / 注释 / 元数据属性 / section 头 / 普通属性。
禁用前缀先被剥离并记录在 `disabled` 上，剩余部分再独立分类。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from wgmeta.core.exceptions import InvalidPrefixError


COMMENT_CHARACTERS = ("#", ";")


class LineKind(Enum):
    """行类型"""
    EMPTY = "empty"
    COMMENT = "comment"
    META = "meta"
    SECTION = "section"
    PLAIN = "plain"


@dataclass(frozen=True)
class ClassifiedLine:
    """分类结果

    Attributes:
        kind: 行类型
        text: 去除首尾空白和禁用前缀后的内容
        disabled: 原始行是否带有禁用前缀
    """
    kind: LineKind
    text: str
    disabled: bool = False


def validate_prefixes(meta_prefix: str, disabled_prefix: str) -> None:
    """校验两个前缀

    Raises:
        InvalidPrefixError: 前缀为空、不以 `#` 或 `;` 开头，或两者相同
    """
    for label, prefix in (("wg_meta_prefix", meta_prefix), ("disabled_prefix", disabled_prefix)):
        if not prefix or not prefix.startswith(COMMENT_CHARACTERS):
            raise InvalidPrefixError(
                f"`{label}` has to begin with either `#` or `;`",
                details={label: prefix},
            )
    # 一个前缀是另一个的前缀时，两类行无法区分
    if meta_prefix.startswith(disabled_prefix) or disabled_prefix.startswith(meta_prefix):
        raise InvalidPrefixError(
            "`wg_meta_prefix` and `disabled_prefix` have to be different",
            details={"wg_meta_prefix": meta_prefix, "disabled_prefix": disabled_prefix},
        )


def _is_config_content(text: str) -> bool:
    """剥离禁用前缀后的内容是否像配置行（section 头、注释或元数据、key = value）"""
    return bool(text) and (text.startswith("[") or text.startswith(COMMENT_CHARACTERS) or "=" in text)


def strip_disabled(line: str, disabled_prefix: str) -> Tuple[str, bool]:
    """剥离（可能重复出现的）禁用前缀，返回剩余内容和是否被禁用

    取最深一层仍是配置内容的剥离结果；例如 `#------ server ------` 这样的分隔注释
    剥离后不是配置内容，保持原样并视为未禁用。
    """
    text = line.strip()
    result = (text, False)
    remainder = text
    while disabled_prefix and remainder.startswith(disabled_prefix):
        remainder = remainder[len(disabled_prefix):].strip()
        if _is_config_content(remainder):
            result = (remainder, True)
    return result


def classify_line(line: str, meta_prefix: str, disabled_prefix: str) -> ClassifiedLine:
    """对单行进行分类

    Args:
        line: 原始行（可带换行符）
        meta_prefix: 元数据前缀，例如 `#+`
        disabled_prefix: 禁用前缀，例如 `#-`

    Returns:
        ClassifiedLine
    """
    text, disabled = strip_disabled(line, disabled_prefix)

    if not text:
        kind = LineKind.EMPTY
    elif text.startswith("["):
        kind = LineKind.SECTION
    elif text.startswith(meta_prefix):
        kind = LineKind.META
    elif text.startswith(COMMENT_CHARACTERS):
        kind = LineKind.COMMENT
    else:
        kind = LineKind.PLAIN

    return ClassifiedLine(kind, text, disabled)


def split_and_trim(text: str, separator: str = "=") -> Tuple[str, str]:
    """按第一个分隔符拆分并去除两侧空白

    Raises:
        ValueError: 不包含分隔符
    """
    name, found, value = text.partition(separator)
    if not found:
        raise ValueError(f"Missing `{separator}` in `{text}`")
    return name.strip(), value.strip()
