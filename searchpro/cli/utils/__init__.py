"""CLI 工具包导出"""

from .formatting import (
    OutputFormatter,
    FormatterConfig,
    Color,
    count_leaves,
)

__all__ = [
    'OutputFormatter',
    'FormatterConfig',
    'Color',
    'count_leaves',
]
