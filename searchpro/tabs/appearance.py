"""外观标签页

搜索框和结果列表的颜色、圆角与字体。
"""

from typing import Any, Dict, Optional

from searchpro.core.form import NUMBER, FormField, parse_number
from searchpro.tabs.base import BaseTabHandler

MAX_BORDER_RADIUS = 50


class AppearanceTabHandler(BaseTabHandler):
    """外观设置"""

    TAB_ID = "appearance"
    TITLE = "Appearance"
    SECTIONS = ("appearance",)

    def check_field(self, form_field: FormField) -> Optional[str]:
        if "borderRadius" in form_field.name and form_field.type == NUMBER:
            number = parse_number(form_field.value)
            if number is not None and not 0 <= number <= MAX_BORDER_RADIUS:
                return f"Border radius must be between 0 and {MAX_BORDER_RADIUS}"
        return None

    def reset_group(self, group: str) -> bool:
        """重置外观中的单个分组，例如 colors 或 searchField"""
        core = self._require_core()
        done = core.reset_section(f"appearance.{group}")
        if done and self.container is not None:
            core.populate_form(self.container)
        return done

    def get_config_summary(self) -> Dict[str, Any]:
        summary = super().get_config_summary()
        colors = self._require_core().get_nested_property("appearance.colors") or {}
        summary["colorCount"] = len(colors) if isinstance(colors, dict) else 0
        return summary
