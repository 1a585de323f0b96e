"""配置序列化

将 InterfaceConfig 还原为配置文本。禁用的 section 每一行都带禁用前缀；
非 plain 模式会在正文前生成带有新校验和的文件头。
"""

from typing import List

from wgmeta.core.checksum import compute_checksum
from wgmeta.core.data_structures import EntryKind, InterfaceConfig, Section


HEADER_TEMPLATE = """# This config is generated and maintained by wg-meta.
# It is strongly recommended to edit this config only through a supporting wg-meta
# implementation (e.g the wg-meta cli interface)
#
# Changes to this header are always overwritten, you can add normal comments in [Peer] and [Interface] section though.
#
{meta_prefix}Checksum = {checksum}
"""


def render_section(section: Section, meta_prefix: str, disabled_prefix: str) -> List[str]:
    """渲染单个 section，返回不含换行符的行列表"""
    lines = [f"[{section.type.value}]"]
    for entry in section.entries:
        if entry.kind is EntryKind.COMMENT:
            lines.append(entry.value)
        elif entry.kind is EntryKind.META:
            lines.append(f"{meta_prefix}{entry.key} = {entry.value}")
        else:
            lines.append(f"{entry.key} = {entry.value}")

    if section.is_disabled:
        lines = [f"{disabled_prefix}{line}" for line in lines]
    return lines


def render_body(config: InterfaceConfig, meta_prefix: str, disabled_prefix: str) -> str:
    """渲染正文（不含文件头），以空行开头，每个 section 后跟一个空行"""
    body = "\n"
    for section in config.iter_sections():
        for line in render_section(section, meta_prefix, disabled_prefix):
            body += line + "\n"
        body += "\n"
    return body


def render_header(checksum: int, meta_prefix: str) -> str:
    return HEADER_TEMPLATE.format(meta_prefix=meta_prefix, checksum=checksum)


def create_wg_config(
    config: InterfaceConfig,
    meta_prefix: str,
    disabled_prefix: str,
    plain: bool = False,
) -> str:
    """将一个接口配置序列化为文本

    Args:
        config: 接口配置
        meta_prefix: 元数据前缀
        disabled_prefix: 禁用前缀
        plain: 为 True 时不生成文件头（用于计算校验和）

    Returns:
        可直接写入 .conf 文件的文本
    """
    body = render_body(config, meta_prefix, disabled_prefix)
    if plain:
        return body
    return render_header(compute_checksum(body), meta_prefix) + body
