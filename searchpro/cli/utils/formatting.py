"""CLI 输出格式化工具

提供颜色、表格、配置值和标签页摘要的格式化，以及错误模板。"""

import json
from typing import Any, Dict, List, Optional


# 错误消息模板
ERROR_TEMPLATES = {
    'read_failed': "无法读取配置文件: {path}\n原因: {reason}",
    'parse_failed': "配置文件解析失败: {path}\n原因: {reason}\n解决方案: 确认文件是 JSON、YAML 或导出的 search-config.js。",
    'validation_failed': "配置未通过安全校验: {path}\n解决方案: 运行 'searchpro validate {path}' 查看详情。",
    'setting_rejected': "配置项无法写入: {key}\n解决方案: 检查路径是否包含保留名称，以及值是否含有脚本或标签。",
    'setting_not_found': "配置项不存在: {key}",
    'section_not_found': "没有可恢复的默认值: {section}",
}


class Color:
    """ANSI 颜色代码"""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'


class FormatterConfig:
    """格式化配置中心"""

    def __init__(self, no_color: bool = False):
        """初始化配置
        Args:
            no_color: 是否禁用颜色输出
        """
        self.no_color = no_color

    def colorize(self, text: str, color: str) -> str:
        if self.no_color:
            return text
        return f"{color}{text}{Color.RESET}"


def count_leaves(value: Any) -> int:
    """统计配置子树中的叶子值数量，列表算作一个叶子"""
    if isinstance(value, dict):
        return sum(count_leaves(child) for child in value.values())
    return 1


class OutputFormatter:
    """CLI 输出格式化器"""

    def __init__(self, config: Optional[FormatterConfig] = None):
        self.config = config or FormatterConfig()

    def success(self, message: str) -> str:
        return f"{self.config.colorize('+', Color.GREEN)} {message}"

    def error(self, message: str) -> str:
        return f"{self.config.colorize('-', Color.RED)} {message}"

    def warning(self, message: str) -> str:
        return f"{self.config.colorize('!', Color.YELLOW)} {message}"

    def format_error(self, error_type: str, **kwargs) -> str:
        """根据模板格式化特定类型的错误
        Args:
            error_type: ERROR_TEMPLATES 中的 key
            **kwargs: 填充模板用的参数
        """
        template = ERROR_TEMPLATES.get(error_type, f"错误: {error_type}")
        try:
            message = template.format(**kwargs)
        except (KeyError, ValueError):
            message = template
        return self.error(message)

    def format_value(self, value: Any) -> str:
        """格式化单个配置值：字符串原样输出，None 输出 null，其余按 JSON 输出"""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, indent=2)

    def format_table(self, headers: List[str], rows: List[List[Any]]) -> str:
        """格式化对齐的表格字符串"""
        if not headers:
            return ""

        widths = [
            max([len(str(header))] + [len(str(row[i])) for row in rows if i < len(row)])
            for i, header in enumerate(headers)
        ]

        lines = [
            self.config.colorize("  ".join(str(h).ljust(widths[i]) for i, h in enumerate(headers)), Color.BOLD),
            "  ".join("-" * width for width in widths),
        ]
        for row in rows:
            lines.append("  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)))
        return "\n".join(lines)

    def format_tab_summary(self, title: str, summary: Dict[str, Any]) -> str:
        """格式化单个标签页的配置摘要

        每个配置段显示其叶子值数量，摘要中的其他键原样显示。
        """
        lines = [self.config.colorize(f" {title} " + "=" * max(0, 40 - len(title)), Color.BOLD)]

        sections = summary.get("sections") or {}
        extras = {key: value for key, value in summary.items() if key not in ("tab", "sections")}

        if not sections and not extras:
            lines.append("  (no settings)")
        for name, value in sections.items():
            detail = f"{count_leaves(value)} settings" if isinstance(value, dict) else self.format_value(value)
            lines.append(f"  {name}: {detail}")
        for key, value in extras.items():
            if isinstance(value, list):
                value = ", ".join(str(item) for item in value) or "-"
            lines.append(f"  {key}: {value}")

        return "\n".join(lines)
