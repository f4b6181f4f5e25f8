"""预览消息通道

向父级执行上下文（嵌入编辑器的页面）发送通知消息。发送是单向的，
不等待确认，失败只记录日志。
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from searchpro.core.logger import get_logger

logger = get_logger("channels")

PREVIEW_MESSAGE_TYPE = "searchProConfigPreview"
UPDATE_MESSAGE_TYPE = "searchProConfigUpdate"
WILDCARD_ORIGIN = "*"


class PreviewChannel(ABC):
    """父级上下文消息通道接口"""

    @property
    @abstractmethod
    def is_nested(self) -> bool:
        """编辑器是否运行在嵌套上下文中（存在父级）"""
        pass

    @abstractmethod
    def post_message(self, message: Dict[str, Any], target_origin: str = WILDCARD_ORIGIN) -> None:
        """向父级发送消息"""
        pass


class DetachedChannel(PreviewChannel):
    """顶层运行时使用的通道，没有父级，消息被丢弃"""

    @property
    def is_nested(self) -> bool:
        return False

    def post_message(self, message: Dict[str, Any], target_origin: str = WILDCARD_ORIGIN) -> None:
        logger.debug("No parent context, message dropped", type=message.get("type"))


class CallbackChannel(PreviewChannel):
    """把消息交给回调函数的通道"""

    def __init__(self, receiver: Callable[[Dict[str, Any], str], None]):
        self.receiver = receiver

    @property
    def is_nested(self) -> bool:
        return True

    def post_message(self, message: Dict[str, Any], target_origin: str = WILDCARD_ORIGIN) -> None:
        self.receiver(message, target_origin)


class RecordingChannel(PreviewChannel):
    """记录所有消息的通道，用于诊断和测试"""

    def __init__(self, nested: bool = True):
        self._nested = nested
        self.messages: List[Tuple[Dict[str, Any], str]] = []

    @property
    def is_nested(self) -> bool:
        return self._nested

    def post_message(self, message: Dict[str, Any], target_origin: str = WILDCARD_ORIGIN) -> None:
        self.messages.append((message, target_origin))

    @property
    def last_message(self) -> Optional[Dict[str, Any]]:
        return self.messages[-1][0] if self.messages else None
