"""属性路径编解码

点号分隔的属性路径（例如 "searchBar.position.top"）与键序列之间的转换。
路径只寻址字典节点，不支持方括号形式的数组下标。
"""

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from searchpro.core.exceptions import MalformedPathError

PATH_SEPARATOR = "."


@dataclass(frozen=True)
class PropertyPath:
    """不可变的属性路径

    segments 至少包含一个非空字符串段。
    """
    segments: Tuple[str, ...]

    def __str__(self) -> str:
        return serialize(self)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def parent(self) -> Tuple[str, ...]:
        """除最后一段之外的所有段"""
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        """最后一段"""
        return self.segments[-1]

    def child(self, key: str) -> 'PropertyPath':
        """追加一段，返回新路径"""
        if not isinstance(key, str) or not key:
            raise MalformedPathError("Path segment must be a non-empty string", path=str(key))
        return PropertyPath(self.segments + (key,))


def parse(text: Union[str, PropertyPath]) -> PropertyPath:
    """解析点号分隔的路径

    Args:
        text: 路径文本，已解析的 PropertyPath 原样返回

    Returns:
        PropertyPath 实例

    Raises:
        MalformedPathError: 路径为空或包含空段（首尾点号、连续点号）
    """
    if isinstance(text, PropertyPath):
        return text

    if not isinstance(text, str) or not text:
        raise MalformedPathError("Property path must be a non-empty string", path=repr(text))

    segments = tuple(text.split(PATH_SEPARATOR))
    if any(segment == "" for segment in segments):
        raise MalformedPathError(f"Property path contains an empty segment: '{text}'", path=text)

    return PropertyPath(segments)


def serialize(path: PropertyPath) -> str:
    """将路径序列化为点号分隔的文本"""
    return PATH_SEPARATOR.join(path.segments)
