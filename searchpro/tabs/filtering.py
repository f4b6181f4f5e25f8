"""过滤标签页

按文本、元素类型、媒体序号和标签过滤搜索结果。
"""

import re
from typing import Optional

from searchpro.core.form import FormField
from searchpro.tabs.base import BaseTabHandler

MEDIA_INDEX_FIELDS = frozenset({"filter.mediaIndexes.allowed", "filter.mediaIndexes.blacklisted"})
MEDIA_INDEX_ITEM = re.compile(r"^\d+$")
FILTER_MODES = ("none", "whitelist", "blacklist")


class FilteringTabHandler(BaseTabHandler):
    """过滤设置"""

    TAB_ID = "filtering"
    TITLE = "Filtering"
    SECTIONS = ("filter",)

    def check_field(self, form_field: FormField) -> Optional[str]:
        if form_field.name in MEDIA_INDEX_FIELDS:
            items = [item.strip() for item in str(form_field.value).split(",") if item.strip()]
            if any(not MEDIA_INDEX_ITEM.match(item) for item in items):
                return "Media indexes must be comma-separated whole numbers"

        if form_field.name.endswith(".mode") or form_field.name == "filter.mode":
            if form_field.value and form_field.value not in FILTER_MODES:
                return "Mode must be none, whitelist or blacklist"
        return None
