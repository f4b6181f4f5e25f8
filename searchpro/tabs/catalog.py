"""内置标签页目录"""

from typing import Dict, List, Type

from searchpro.core.interfaces.core import IControlPanelCore
from searchpro.tabs.advanced import AdvancedTabHandler
from searchpro.tabs.appearance import AppearanceTabHandler
from searchpro.tabs.base import BaseTabHandler
from searchpro.tabs.content import ContentTabHandler
from searchpro.tabs.data_sources import DataSourcesTabHandler
from searchpro.tabs.display import DisplayTabHandler
from searchpro.tabs.filtering import FilteringTabHandler
from searchpro.tabs.general import GeneralTabHandler
from searchpro.tabs.management import ManagementTabHandler

BUILTIN_TABS: List[Type[BaseTabHandler]] = [
    GeneralTabHandler,
    AppearanceTabHandler,
    DisplayTabHandler,
    ContentTabHandler,
    FilteringTabHandler,
    DataSourcesTabHandler,
    AdvancedTabHandler,
    ManagementTabHandler,
]


def register_builtin_tabs(core: IControlPanelCore) -> Dict[str, BaseTabHandler]:
    """创建并注册全部内置标签页

    Returns:
        标签页 ID 到处理器的映射
    """
    handlers: Dict[str, BaseTabHandler] = {}
    for handler_class in BUILTIN_TABS:
        handler = handler_class()
        core.register_tab(handler.TAB_ID, handler)
        handlers[handler.TAB_ID] = handler
    return handlers
