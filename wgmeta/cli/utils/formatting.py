"""CLI 输出格式化工具

提供带颜色的消息前缀和对齐表格。"""

import json
from typing import Any, List, Optional


class Color:
    """ANSI 颜色代码"""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


class FormatterConfig:
    """格式化配置"""

    def __init__(self, no_color: bool = False):
        self.no_color = no_color

    def colorize(self, text: str, color: str) -> str:
        """根据配置为文本添加 ANSI 颜色"""
        if self.no_color:
            return text
        return f"{color}{text}{Color.RESET}"


class OutputFormatter:
    """CLI 输出格式化器"""

    def __init__(self, config: Optional[FormatterConfig] = None):
        self.config = config or FormatterConfig()

    def success(self, message: str) -> str:
        prefix = self.config.colorize("+", Color.GREEN)
        return f"{prefix} {message}"

    def error(self, message: str) -> str:
        prefix = self.config.colorize("-", Color.RED)
        return f"{prefix} {message}"

    def warning(self, message: str) -> str:
        prefix = self.config.colorize("!", Color.YELLOW)
        return f"{prefix} {message}"

    def info(self, message: str) -> str:
        prefix = self.config.colorize("*", Color.BLUE)
        return f"{prefix} {message}"

    def format_table(self, headers: List[str], rows: List[List[Any]]) -> str:
        """格式化对齐的表格字符串

        Args:
            headers: 表头列表
            rows: 数据行列表
        """
        if not headers:
            return ""

        column_widths = []
        for i, header in enumerate(headers):
            max_width = len(str(header))
            for row in rows:
                if i < len(row):
                    max_width = max(max_width, len(str(row[i])))
            column_widths.append(max_width)

        lines = []
        header_row = "  ".join(str(h).ljust(w) for h, w in zip(headers, column_widths))
        lines.append(self.config.colorize(header_row.rstrip(), Color.BOLD))
        lines.append("  ".join("-" * w for w in column_widths))
        for row in rows:
            cells = [str(cell).ljust(w) for cell, w in zip(row, column_widths)]
            lines.append("  ".join(cells).rstrip())

        return "\n".join(lines)


def to_json(data: Any) -> str:
    """导出为 JSON 格式"""
    return json.dumps(data, ensure_ascii=False, indent=2)
