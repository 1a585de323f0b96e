"""配置内容校验和

对规范化的配置正文（不含文件头）计算 MD5，取前 4 个字节作为无符号 32 位整数。
仅用于发现外部修改，不是安全边界。
"""

import hashlib
import warnings
from typing import Optional

from wgmeta.core.exceptions import IntegrityWarning
from wgmeta.core.logger import get_logger

logger = get_logger("checksum")


def compute_checksum(body: str) -> int:
    """计算正文的校验和

    Args:
        body: plain 模式下序列化得到的正文

    Returns:
        0 .. 2**32-1 之间的整数
    """
    digest = hashlib.md5(body.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], byteorder="little", signed=False)


def parse_checksum(value: str) -> Optional[int]:
    """解析文件头中的校验和，无法解析时返回 None"""
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def verify_checksum(interface: str, stored: Optional[int], computed: int) -> bool:
    """比较文件头记录的校验和与当前计算值

    不一致时仅发出 IntegrityWarning，不会中断加载。

    Returns:
        一致返回 True；文件从未记录校验和或不一致返回 False
    """
    if stored is None:
        logger.info("No checksum recorded, config not yet managed by wg-meta", interface=interface)
        return False

    if stored != computed:
        logger.warning(
            "Config has been changed by an other program or user",
            interface=interface,
            stored=stored,
            computed=computed,
        )
        warnings.warn(
            f"Config `{interface}.conf` has been changed by an other program or user. "
            "This is just a warning.",
            IntegrityWarning,
            stacklevel=3,
        )
        return False

    logger.debug("Checksum verified", interface=interface, checksum=computed)
    return True
