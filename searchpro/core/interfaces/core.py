"""控制面板核心服务接口定义

标签页处理器只通过这些方法访问配置树、存储和通知。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING


class IControlPanelCore(ABC):
    """控制面板核心接口"""

    @abstractmethod
    def sanitize_input(self, value: Any, max_length: Optional[int] = None) -> str:
        """净化单个输入值"""
        pass

    @abstractmethod
    def get_nested_property(self, path: str) -> Any:
        """读取配置值"""
        pass

    @abstractmethod
    def safe_set_nested_property(self, path: str, value: Any) -> bool:
        """安全写入配置值"""
        pass

    @abstractmethod
    def get_default_config(self) -> Dict[str, Any]:
        """获取出厂默认配置"""
        pass

    @abstractmethod
    def populate_form(self, container: 'FormContainer') -> None:
        """用配置树填充表单"""
        pass

    @abstractmethod
    def setup_form_listeners(self, container: 'FormContainer') -> None:
        """为表单注册变更监听器"""
        pass

    @abstractmethod
    def show_toast(self, title: str, message: str, level: str = "info") -> None:
        """显示通知"""
        pass

    @abstractmethod
    def safe_storage_get(self, key: str, default: Any = None) -> Any:
        """安全读取存储"""
        pass

    @abstractmethod
    def safe_storage_set(self, key: str, value: Any) -> bool:
        """安全写入存储"""
        pass

    @abstractmethod
    def validate_field(self, form_field: 'FormField') -> Any:
        """验证单个字段"""
        pass

    @abstractmethod
    def apply_field(self, form_field: 'FormField') -> bool:
        """把字段值写入配置树，不触发预览"""
        pass

    @abstractmethod
    def on_form_change(self, form_field: 'FormField', preview_delay_ms: Optional[float] = None) -> bool:
        """处理一次字段编辑"""
        pass

    @abstractmethod
    def request_preview(self, path: str, value: Any, delay_ms: Optional[float] = None) -> None:
        """安排一次实时预览"""
        pass

    @abstractmethod
    def reset_section(self, section_path: str) -> bool:
        """把单个配置段恢复为默认值"""
        pass

    @abstractmethod
    def register_tab(self, tab_id: str, handler: Any) -> None:
        """注册标签页处理器"""
        pass


if TYPE_CHECKING:
    from searchpro.core.form import FormContainer, FormField
