"""内容净化器

对来自表单或外部文件的字符串进行转义、长度限制和危险模式检测，
并支持对整棵配置树递归净化。
"""

import re
from typing import Any, Dict, List, Optional, Pattern

from searchpro.core.exceptions import UnsafeContentError
from searchpro.core.logger import get_logger
from searchpro.core.property_guard import is_safe_key

logger = get_logger("sanitizer")

MAX_STRING_LENGTH = 10000
DEFAULT_MAX_DEPTH = 10
TRUNCATION_MARKER = "…"

DANGEROUS_PATTERNS: List[Pattern] = [
    re.compile(r"<script[\s\S]*?>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"\bon\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe[\s\S]*?>", re.IGNORECASE),
    re.compile(r"<object[\s\S]*?>", re.IGNORECASE),
    re.compile(r"<embed[\s\S]*?>", re.IGNORECASE),
    re.compile(r"<form[\s\S]*?>", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"Function\s*\(", re.IGNORECASE),
]

# 未构成实体引用的 &，已有实体保持不变，保证转义幂等
_BARE_AMPERSAND = re.compile(r"&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#[0-9]+|#[xX][0-9a-fA-F]+);)")
_PARTIAL_ENTITY = re.compile(r"&[#a-zA-Z0-9]*$")


class ContentSanitizer:
    """内容净化器

    sanitize_text 的结果不包含活动标签，且对同一输入重复净化结果不变。
    """

    def __init__(self, max_string_length: int = MAX_STRING_LENGTH):
        """初始化净化器

        Args:
            max_string_length: 默认的字符串长度上限
        """
        self.max_string_length = max_string_length

    def sanitize_text(self, value: Any, max_length: Optional[int] = None) -> str:
        """净化单个值

        Args:
            value: 任意值，非字符串先转换为字符串，None 视为空字符串
            max_length: 本次调用的长度上限，默认使用全局上限

        Returns:
            转义并截断后的字符串
        """
        if value is None:
            text = ""
        elif isinstance(value, str):
            text = value
        else:
            text = str(value)

        escaped = _BARE_AMPERSAND.sub("&amp;", text)
        escaped = escaped.replace("<", "&lt;").replace(">", "&gt;")

        limit = self.max_string_length if max_length is None else max_length
        if len(escaped) <= limit:
            return escaped

        logger.security("Input truncated due to length limit", length=len(escaped), limit=limit)

        keep = limit - len(TRUNCATION_MARKER)
        if keep <= 0:
            return _PARTIAL_ENTITY.sub("", escaped[:limit])

        clipped = _PARTIAL_ENTITY.sub("", escaped[:keep])
        return clipped + TRUNCATION_MARKER

    def is_content_safe(self, text: Any) -> bool:
        """检查文本是否包含危险模式

        非字符串值视为安全。
        """
        if not isinstance(text, str):
            return True
        return not any(pattern.search(text) for pattern in DANGEROUS_PATTERNS)

    def check_content(self, text: Any, field: Optional[str] = None) -> None:
        """检查文本，不安全时抛出异常

        Raises:
            UnsafeContentError: 文本命中危险模式
        """
        if not self.is_content_safe(text):
            raise UnsafeContentError("Unsafe content detected", field=field)

    def sanitize_tree_in_place(self, tree: Dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
        """递归校验并净化整棵配置树

        先完整校验，全部通过后才改写字符串叶子；校验失败时配置树保持原样。

        Args:
            tree: 配置树
            max_depth: 最大嵌套深度

        Returns:
            校验通过并完成净化返回 True
        """
        if not isinstance(tree, dict):
            logger.security("Config is not a mapping", type=type(tree).__name__)
            return False

        if not self._check_node(tree, max_depth, 0, ""):
            return False

        self._rewrite_node(tree)
        return True

    @staticmethod
    def is_flat_list(value: Any) -> bool:
        """列表中只含标量时返回 True，非列表值也返回 True"""
        if not isinstance(value, list):
            return True
        return not any(isinstance(item, (dict, list)) for item in value)

    def sanitize_value(self, value: Any) -> Any:
        """净化标量或标量列表，其他类型原样返回"""
        if isinstance(value, str):
            return self.sanitize_text(value)
        if isinstance(value, list):
            return [self.sanitize_text(item) if isinstance(item, str) else item for item in value]
        return value

    def _check_node(self, node: Dict[str, Any], max_depth: int, depth: int, prefix: str) -> bool:
        if depth > max_depth:
            logger.security("Config nesting exceeds depth limit", path=prefix, max_depth=max_depth)
            return False

        for key, value in node.items():
            if not is_safe_key(key):
                logger.security("Unsafe property name in config", key=str(key)[:100], path=prefix)
                return False

            path = f"{prefix}.{key}" if prefix else key

            if isinstance(value, dict):
                if not self._check_node(value, max_depth, depth + 1, path):
                    return False
            elif isinstance(value, list):
                if not self.is_flat_list(value):
                    logger.security("Nested structure inside list", path=path)
                    return False
                for item in value:
                    if not self.is_content_safe(item):
                        logger.security("Unsafe content in config list", path=path)
                        return False
            elif not self.is_content_safe(value):
                logger.security("Unsafe content in config property", path=path)
                return False

        return True

    def _rewrite_node(self, node: Dict[str, Any]) -> None:
        for key, value in node.items():
            if isinstance(value, dict):
                self._rewrite_node(value)
            else:
                node[key] = self.sanitize_value(value)
