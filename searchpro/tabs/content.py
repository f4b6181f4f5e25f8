"""内容标签页

决定哪些漫游元素参与搜索。
"""

from typing import Any, Dict

from searchpro.tabs.base import BaseTabHandler


class ContentTabHandler(BaseTabHandler):
    """内容设置"""

    TAB_ID = "content"
    TITLE = "Content"
    SECTIONS = ("includeContent",)

    def get_config_summary(self) -> Dict[str, Any]:
        summary = super().get_config_summary()
        elements = self._require_core().get_nested_property("includeContent.elements") or {}
        if isinstance(elements, dict):
            summary["enabledElements"] = sorted(key for key, value in elements.items() if value is True)
        return summary
