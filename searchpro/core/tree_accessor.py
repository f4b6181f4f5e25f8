"""配置树访问器

对嵌套配置树的读取、写入和合并。每次访问都经过路径解析和属性守卫，
字符串值在写入前经过净化器处理。
"""

import copy
from typing import Any, Dict, Optional, Union

from searchpro.core.exceptions import BlockedPropertyError, MalformedPathError
from searchpro.core.logger import get_logger
from searchpro.core.path_codec import PropertyPath, parse
from searchpro.core.property_guard import check_path, is_safe_key
from searchpro.core.sanitizer import DEFAULT_MAX_DEPTH, ContentSanitizer

logger = get_logger("tree_accessor")

PathLike = Union[str, PropertyPath]


class TreeAccessor:
    """配置树访问器

    所有方法都不会向调用方抛出路径或守卫异常：
    get 返回 None，set 返回 False，merge 跳过不安全的键。
    """

    def __init__(self, sanitizer: Optional[ContentSanitizer] = None):
        self.sanitizer = sanitizer or ContentSanitizer()

    def get(self, tree: Any, path: PathLike) -> Any:
        """读取嵌套属性

        Args:
            tree: 配置树
            path: 属性路径

        Returns:
            属性值；路径无效、被守卫拒绝、节点缺失或中间节点不是字典时返回 None
        """
        if not isinstance(tree, dict):
            return None

        try:
            parsed = parse(path)
            check_path(parsed)
        except MalformedPathError as e:
            logger.debug("Malformed property path on read", path=str(path), error=e.message)
            return None
        except BlockedPropertyError as e:
            logger.security("Unsafe property access", key=e.key)
            return None

        current: Any = tree
        for key in parsed:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    def contains(self, tree: Any, path: PathLike) -> bool:
        """路径是否存在（值为 None 也算存在）"""
        if not isinstance(tree, dict):
            return False
        try:
            parsed = parse(path)
            check_path(parsed)
        except (MalformedPathError, BlockedPropertyError):
            return False

        current: Any = tree
        for key in parsed:
            if not isinstance(current, dict) or key not in current:
                return False
            current = current[key]
        return True

    def set(self, tree: Dict[str, Any], path: PathLike, value: Any) -> bool:
        """写入嵌套属性

        全部路径段通过守卫后才会修改配置树，不存在的中间节点会被创建为空字典，
        标量中间节点会被替换为字典。

        Args:
            tree: 配置树
            path: 属性路径
            value: 要写入的值

        Returns:
            写入成功返回 True；路径格式错误、被守卫拒绝，或值中含有不安全的键、
            列表中嵌套结构时返回 False，配置树保持不变
        """
        if not isinstance(tree, dict):
            logger.warning("Refusing to set property on non-mapping", type=type(tree).__name__)
            return False

        try:
            parsed = parse(path)
            check_path(parsed)
        except MalformedPathError as e:
            logger.warning("Malformed property path", path=str(path), error=e.message)
            return False
        except BlockedPropertyError as e:
            logger.security("Blocked unsafe property in path", key=e.key)
            return False

        rejected = self._find_rejected_value(value, 0)
        if rejected is not None:
            logger.security("Rejected unsafe value", path=str(path), reason=rejected)
            return False

        if isinstance(value, dict):
            prepared = self.merge({}, value)
        else:
            prepared = self.sanitizer.sanitize_value(value)

        current = tree
        for key in parsed.parent:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[parsed.leaf] = prepared
        return True

    def merge(
        self,
        target: Dict[str, Any],
        source: Dict[str, Any],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> Dict[str, Any]:
        """非破坏性深度合并

        Args:
            target: 基础配置树，不会被修改
            source: 覆盖配置树
            max_depth: 最大递归深度，超出部分被跳过

        Returns:
            合并后的新配置树
        """
        return self._merge(target, source, max_depth, 0)

    def _find_rejected_value(self, value: Any, depth: int) -> Optional[str]:
        """写入前检查整个值，返回拒绝原因；值可以整体写入时返回 None"""
        if isinstance(value, list):
            return None if self.sanitizer.is_flat_list(value) else "nested structure inside list"
        if not isinstance(value, dict):
            return None
        if depth > DEFAULT_MAX_DEPTH:
            return "nesting too deep"
        for key, child in value.items():
            if not is_safe_key(key):
                return f"unsafe property name {str(key)[:100]}"
            reason = self._find_rejected_value(child, depth + 1)
            if reason is not None:
                return reason
        return None

    def _merge(self, target: Any, source: Any, max_depth: int, depth: int) -> Dict[str, Any]:
        result = copy.deepcopy(target) if isinstance(target, dict) else {}

        if not isinstance(source, dict):
            return result

        for key, value in source.items():
            if not is_safe_key(key):
                logger.security("Blocked dangerous property during merge", key=str(key)[:100])
                continue

            if not self.sanitizer.is_flat_list(value):
                logger.security("Blocked nested structure inside list during merge", key=key)
                continue

            if isinstance(value, dict):
                # 超出深度的子树不写入，目标中已有的值保持不变
                if depth + 1 > max_depth:
                    logger.warning("Object merge depth limit reached, subtree skipped",
                                   key=key, max_depth=max_depth)
                    continue
                result[key] = self._merge(result.get(key), value, max_depth, depth + 1)
            else:
                result[key] = copy.deepcopy(self.sanitizer.sanitize_value(value))

        return result
