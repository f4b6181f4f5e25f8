"""用户通知

控制面板通过通知器向用户显示简短的提示消息（toast）。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from searchpro.core.logger import get_logger

logger = get_logger("notifier")

DEFAULT_TOAST_DURATION_MS = 5000


@dataclass(frozen=True)
class Toast:
    """提示消息"""
    level: str
    title: str
    message: str
    duration_ms: int = DEFAULT_TOAST_DURATION_MS


class ToastNotifier(ABC):
    """通知器接口"""

    @abstractmethod
    def notify(self, toast: Toast) -> None:
        pass


class LoggingNotifier(ToastNotifier):
    """没有界面时把提示写入日志"""

    def notify(self, toast: Toast) -> None:
        logger.info("Toast", level=toast.level, title=toast.title, message=toast.message)


class RecordingNotifier(ToastNotifier):
    """记录所有提示"""

    def __init__(self):
        self.toasts: List[Toast] = []

    def notify(self, toast: Toast) -> None:
        self.toasts.append(toast)

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None
