"""属性名安全守卫

判断单个键是否可以出现在配置树中。所有读写配置树的操作都必须对路径的每一段调用守卫。
"""

from typing import Any, FrozenSet, Iterable

from searchpro.core.exceptions import BlockedPropertyError


# 对象原型链上的保留属性名
RESERVED_NAMES: FrozenSet[str] = frozenset({
    "__proto__",
    "constructor",
    "prototype",
    "__defineGetter__",
    "__defineSetter__",
    "__lookupGetter__",
    "__lookupSetter__",
    "valueOf",
    "toString",
    "hasOwnProperty",
    "isPrototypeOf",
    "propertyIsEnumerable",
})

RESERVED_PREFIX = "__"

MAX_KEY_LENGTH = 100


def is_safe_key(key: Any) -> bool:
    """判断键是否安全

    Args:
        key: 待检查的键

    Returns:
        键为字符串、不是保留名、不以保留前缀开头且长度不超过上限时返回 True
    """
    if not isinstance(key, str):
        return False
    if key in RESERVED_NAMES:
        return False
    if key.startswith(RESERVED_PREFIX):
        return False
    return len(key) <= MAX_KEY_LENGTH


def check_key(key: Any) -> str:
    """检查单个键，不安全时抛出异常

    Raises:
        BlockedPropertyError: 键未通过守卫
    """
    if not is_safe_key(key):
        shown = key[:MAX_KEY_LENGTH] if isinstance(key, str) else repr(key)
        raise BlockedPropertyError(f"Blocked unsafe property name: {shown}", key=shown)
    return key


def check_path(segments: Iterable[Any]) -> None:
    """检查路径的每一段

    只要有一段不安全就整体拒绝，调用方应在修改配置树之前完成检查。

    Raises:
        BlockedPropertyError: 任一段未通过守卫
    """
    for segment in segments:
        check_key(segment)
