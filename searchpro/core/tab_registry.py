"""标签页处理器注册表

管理标签页处理器的注册、激活和批量操作。处理器的能力按方法是否存在来判断，
缺少某个方法的处理器在对应的批量操作中被跳过。"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

from searchpro.core.logger import Logger, get_logger

if TYPE_CHECKING:
    from searchpro.core.form import FormContainer
    from searchpro.core.interfaces.core import IControlPanelCore


def _capability(handler: Any, name: str):
    method = getattr(handler, name, None)
    return method if callable(method) else None


class TabHandlerRegistry:
    """标签页处理器注册表"""

    def __init__(self, core: Optional['IControlPanelCore'] = None):
        self._core = core
        self._handlers: Dict[str, Any] = {}
        self._active_tab: Optional[str] = None
        self.logger = get_logger(__name__).bind(component="tab_registry")

    @property
    def active_tab(self) -> Optional[str]:
        """当前激活的标签页"""
        return self._active_tab

    def tab_ids(self) -> List[str]:
        """按注册顺序返回标签页 ID"""
        return list(self._handlers.keys())

    def get_handler(self, tab_id: str) -> Optional[Any]:
        return self._handlers.get(tab_id)

    def register(self, tab_id: str, handler: Any) -> None:
        """注册处理器并绑定核心

        重复注册会直接替换旧处理器，不调用旧处理器的 cleanup。
        """
        if tab_id in self._handlers:
            self.logger.debug("Replacing tab handler", tab_id=tab_id)

        self._handlers[tab_id] = handler

        set_core = _capability(handler, "set_core")
        if set_core is not None and self._core is not None:
            set_core(self._core)

        self.logger.info("Tab handler registered", tab_id=tab_id, handler=type(handler).__name__)

    def unregister(self, tab_id: str) -> Optional[Any]:
        """移除处理器并调用其 cleanup"""
        handler = self._handlers.pop(tab_id, None)
        if handler is None:
            return None

        if self._active_tab == tab_id:
            self._active_tab = None
        self._call(tab_id, handler, "cleanup")
        return handler

    def activate(self, tab_id: str, container: 'FormContainer') -> bool:
        """激活标签页

        Returns:
            处理器存在并完成初始化返回 True
        """
        handler = self._handlers.get(tab_id)
        if handler is None:
            self.logger.warning("No handler registered for tab", tab_id=tab_id)
            return False

        self._active_tab = tab_id
        Logger.set_tab_id(tab_id)

        init = _capability(handler, "init")
        if init is None:
            return True
        try:
            init(container)
            self.logger.debug("Tab handler initialized", tab_id=tab_id)
            return True
        except Exception as e:
            self.logger.error("Tab handler initialization failed", tab_id=tab_id, error=str(e))
            return False

    def validate_all(self, containers: Optional[Dict[str, 'FormContainer']] = None) -> bool:
        """验证所有标签页

        Args:
            containers: 标签页 ID 到表单的映射，未提供的标签页使用 None

        Returns:
            所有处理器都通过验证返回 True；没有 validate_form 的处理器视为通过，
            抛出异常的处理器视为失败
        """
        containers = containers or {}
        all_valid = True

        for tab_id, handler in self._handlers.items():
            validate = _capability(handler, "validate_form")
            if validate is None:
                continue
            try:
                if not validate(containers.get(tab_id)):
                    self.logger.warning("Tab validation failed", tab_id=tab_id)
                    all_valid = False
            except Exception as e:
                self.logger.error("Tab validation raised", tab_id=tab_id, error=str(e))
                all_valid = False

        return all_valid

    def collect_config_summary(self) -> Dict[str, Any]:
        """收集各标签页的配置摘要，仅用于诊断"""
        summary: Dict[str, Any] = {}
        for tab_id, handler in self._handlers.items():
            get_summary = _capability(handler, "get_config_summary")
            if get_summary is None:
                continue
            try:
                summary[tab_id] = get_summary()
            except Exception as e:
                self.logger.warning("Failed to collect tab summary", tab_id=tab_id, error=str(e))
        return summary

    def reset_all(self) -> None:
        """调用每个处理器的 reset_to_defaults"""
        for tab_id, handler in list(self._handlers.items()):
            self._call(tab_id, handler, "reset_to_defaults")

    def cleanup_all(self) -> None:
        """调用每个处理器的 cleanup"""
        for tab_id, handler in list(self._handlers.items()):
            self._call(tab_id, handler, "cleanup")
        self._active_tab = None

    def _call(self, tab_id: str, handler: Any, name: str) -> None:
        method = _capability(handler, name)
        if method is None:
            return
        try:
            method()
        except Exception as e:
            self.logger.warning("Tab handler call failed", tab_id=tab_id, method=name, error=str(e))
