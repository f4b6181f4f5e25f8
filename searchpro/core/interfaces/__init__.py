"""Search Pro 核心模块接口定义"""

from .tab_handler import ITabHandler
from .core import IControlPanelCore

__all__ = [
    'ITabHandler',
    'IControlPanelCore',
]
