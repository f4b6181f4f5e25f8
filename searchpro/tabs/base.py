"""标签页处理器基类

每个标签页负责配置树中的若干顶级配置段。基类实现了通用的初始化、验证、
表单写回、预览、重置和清理流程，子类只需声明配置段并补充各自的规则。
"""

from typing import Any, Dict, List, Optional, Tuple

from searchpro.core.exceptions import TabHandlerException
from searchpro.core.form import FormContainer, FormField
from searchpro.core.interfaces.core import IControlPanelCore
from searchpro.core.interfaces.tab_handler import ITabHandler
from searchpro.core.logger import get_logger


class BaseTabHandler(ITabHandler):
    """标签页处理器基类"""

    TAB_ID = ""
    TITLE = ""
    # 本标签页负责的配置段
    SECTIONS: Tuple[str, ...] = ()

    def __init__(self):
        self.core: Optional[IControlPanelCore] = None
        self.container: Optional[FormContainer] = None
        self.logger = get_logger(__name__).bind(component=f"{self.TAB_ID}_tab")

    @property
    def initialized(self) -> bool:
        return self.container is not None

    def set_core(self, core: IControlPanelCore) -> None:
        self.core = core

    def _require_core(self) -> IControlPanelCore:
        if self.core is None:
            raise TabHandlerException("Tab handler has no core", details=self.TAB_ID)
        return self.core

    def init(self, container: FormContainer) -> None:
        """绑定表单、注册监听器并填充当前配置

        Raises:
            TabHandlerException: 尚未绑定核心
        """
        core = self._require_core()
        self.container = container
        core.setup_form_listeners(container)
        core.populate_form(container)
        self.setup(container)
        self.logger.info("Tab initialized", tab=self.TAB_ID, fields=len(container))

    def setup(self, container: FormContainer) -> None:
        """子类在此注册额外的监听器"""
        pass

    def validate_form(self, container: Optional[FormContainer] = None) -> bool:
        """验证表单，通用规则之后再应用标签页自己的规则"""
        container = container or self.container
        if container is None:
            return True

        core = self._require_core()
        all_valid = True
        for form_field in container:
            if not core.validate_field(form_field).is_valid:
                all_valid = False
                continue
            message = self.check_field(form_field)
            if message:
                form_field.mark_invalid(message)
                all_valid = False

        if not all_valid:
            self.logger.debug("Tab form invalid", tab=self.TAB_ID)
        return all_valid

    def check_field(self, form_field: FormField) -> Optional[str]:
        """标签页特有的字段规则，返回错误消息或 None"""
        return None

    def update_config_from_form(self, container: Optional[FormContainer] = None) -> None:
        """把表单的全部字段写入配置树"""
        container = container or self.container
        if container is None:
            return

        core = self._require_core()
        failed: List[str] = []
        for form_field in container:
            if not core.apply_field(form_field):
                failed.append(form_field.name)

        if failed:
            self.logger.warning("Some fields were not written", tab=self.TAB_ID, fields=failed)

    def apply_live_preview(self, path: str, value: Any) -> None:
        self._require_core().request_preview(path, value)

    def reset_to_defaults(self) -> None:
        """把本标签页负责的配置段恢复为默认值并刷新表单"""
        core = self._require_core()
        for section in self.SECTIONS:
            core.reset_section(section)
        if self.container is not None:
            core.populate_form(self.container)
        self.logger.info("Tab reset to defaults", tab=self.TAB_ID)

    def get_config_summary(self) -> Dict[str, Any]:
        core = self._require_core()
        return {
            "tab": self.TITLE,
            "sections": {section: core.get_nested_property(section) for section in self.SECTIONS},
        }

    def cleanup(self) -> None:
        self.container = None
        self.logger.debug("Tab cleaned up", tab=self.TAB_ID)
