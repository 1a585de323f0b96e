"""CLI 工具包导出"""

from .formatting import (
    OutputFormatter,
    FormatterConfig,
    Color,
    to_json,
)
from .store_utils import build_store, commit_store

__all__ = [
    'OutputFormatter',
    'FormatterConfig',
    'Color',
    'to_json',
    'build_store',
    'commit_store',
]
