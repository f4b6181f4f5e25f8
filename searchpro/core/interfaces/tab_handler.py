"""标签页处理器接口定义"""

from abc import ABC, abstractmethod
from typing import Any, Dict, TYPE_CHECKING


class ITabHandler(ABC):
    """标签页处理器接口

    只有 set_core 和 init 是必需的，其余能力由注册表按存在与否调用。
    """

    @abstractmethod
    def set_core(self, core: 'IControlPanelCore') -> None:
        """绑定控制面板核心"""
        pass

    @abstractmethod
    def init(self, container: 'FormContainer') -> None:
        """标签页激活时初始化"""
        pass

    def validate_form(self, container: 'FormContainer') -> bool:
        """验证标签页表单"""
        return True

    def update_config_from_form(self, container: 'FormContainer') -> None:
        """把表单的全部字段写入配置树"""
        pass

    def apply_live_preview(self, path: str, value: Any) -> None:
        """请求实时预览"""
        pass

    def reset_to_defaults(self) -> None:
        """把标签页负责的配置段恢复为默认值"""
        pass

    def cleanup(self) -> None:
        """释放标签页持有的定时器和监听器"""
        pass

    def get_config_summary(self) -> Dict[str, Any]:
        """诊断用的配置摘要"""
        return {}


if TYPE_CHECKING:
    from searchpro.core.form import FormContainer
    from searchpro.core.interfaces.core import IControlPanelCore
