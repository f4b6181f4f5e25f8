"""通用设置标签页

搜索栏尺寸与位置、自动隐藏、移动端断点和最少搜索字符数。
"""

import re
from typing import Optional

from searchpro.core.form import FormContainer, FormField
from searchpro.tabs.base import BaseTabHandler

WIDTH_PATTERN = re.compile(r"^\d+(%|px|em|rem|vw)?$")
PIXEL_WIDTH = re.compile(r"^(\d+)(px)?$")


class GeneralTabHandler(BaseTabHandler):
    """通用设置"""

    TAB_ID = "general"
    TITLE = "General"
    SECTIONS = (
        "autoHide",
        "mobileBreakpoint",
        "minSearchChars",
        "minSearchLength",
        "searchBar",
        "elementTriggering",
    )

    def setup(self, container: FormContainer) -> None:
        container.add_change_listener(self._after_change)

    def _after_change(self, form_field: FormField) -> None:
        core = self._require_core()

        if form_field.name == "searchBar.width" and isinstance(form_field.value, str):
            match = PIXEL_WIDTH.match(form_field.value.strip())
            if match:
                width = int(match.group(1))
                core.safe_set_nested_property("searchBar.width", width)
                core.request_preview("searchBar.width", width)

        # 搜索插件读取 minSearchLength
        elif form_field.name == "minSearchChars":
            value = core.get_nested_property("minSearchChars")
            if value is not None:
                core.safe_set_nested_property("minSearchLength", value)

    def check_field(self, form_field: FormField) -> Optional[str]:
        if form_field.name == "searchBar.width":
            value = str(form_field.value).strip()
            if value and not WIDTH_PATTERN.match(value):
                return "Enter a valid width (e.g., 350px or 95%)"
        return None

    def reset_to_defaults(self) -> None:
        super().reset_to_defaults()
        core = self._require_core()
        core.safe_set_nested_property("minSearchLength", core.get_nested_property("minSearchChars"))
