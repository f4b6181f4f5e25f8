"""显示标签页

结果显示方式、缩略图、标签文字和标签来源。
"""

from typing import Optional

from searchpro.core.assets import is_thumbnail_asset_field
from searchpro.core.form import FormField
from searchpro.tabs.base import BaseTabHandler


class DisplayTabHandler(BaseTabHandler):
    """显示设置"""

    TAB_ID = "display"
    TITLE = "Display"
    SECTIONS = ("display", "thumbnailSettings", "displayLabels", "useAsLabel")

    def check_field(self, form_field: FormField) -> Optional[str]:
        if is_thumbnail_asset_field(form_field.name) and ".." in str(form_field.value):
            return "Image path must not leave the assets folder"
        return None

    def reset_thumbnails(self) -> bool:
        """只重置缩略图设置"""
        core = self._require_core()
        done = core.reset_section("thumbnailSettings")
        if done and self.container is not None:
            core.populate_form(self.container)
        return done
