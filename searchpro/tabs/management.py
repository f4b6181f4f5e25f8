"""管理标签页

只展示安装说明，不负责任何配置段。
"""

from typing import Any, Dict

from searchpro.core.form import FormContainer
from searchpro.tabs.base import BaseTabHandler


class ManagementTabHandler(BaseTabHandler):
    """管理页"""

    TAB_ID = "management"
    TITLE = "Management"

    def init(self, container: FormContainer) -> None:
        self._require_core()
        self.container = container

    def validate_form(self, container=None) -> bool:
        return True

    def update_config_from_form(self, container=None) -> None:
        pass

    def reset_to_defaults(self) -> None:
        pass

    def get_config_summary(self) -> Dict[str, Any]:
        return {"tab": self.TITLE, "sections": {}}
