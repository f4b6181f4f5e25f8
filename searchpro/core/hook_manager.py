"""Hook 管理系统

提供事件钩子注册和触发机制，用于在配置载入、重置和预览提交时通知外部协作者。"""

from collections import defaultdict
from typing import Any, Callable, Dict, List

from searchpro.core.logger import get_logger

logger = get_logger("hook_manager")


class HookManager:
    """钩子管理器"""

    def __init__(self):
        self._hooks: Dict[str, List[Callable[..., Any]]] = defaultdict(list)

    def register_hook(self, event: str, callback: Callable[..., Any]) -> None:
        """注册钩子回调"""
        self._hooks[event].append(callback)
        logger.debug("Hook registered", hook_event=event)

    def unregister_hook(self, event: str, callback: Callable[..., Any]) -> None:
        """移除钩子回调，未注册时忽略"""
        callbacks = self._hooks.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def trigger_hook(self, event: str, *args, **kwargs) -> None:
        """触发钩子，单个回调失败不影响其他回调"""
        for callback in list(self._hooks.get(event, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error("Hook execution failed", hook_event=event, error=str(e))

    def clear(self) -> None:
        """移除所有钩子"""
        self._hooks.clear()


class PreviewEvents:
    """实时预览相关事件定义"""
    COMMITTED = "preview.committed"
    SKIPPED = "preview.skipped"
    PERSIST_FAILED = "preview.persist_failed"


class ConfigEvents:
    """配置生命周期事件定义"""
    LOADED = "config.loaded"
    LOAD_FAILED = "config.load_failed"
    RESET = "config.reset"
    APPLIED = "config.applied"
