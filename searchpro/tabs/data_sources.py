"""数据源标签页

Google 表格与本地 CSV 两种外部数据源，两者互斥。
"""

import re
from typing import Optional

from searchpro.core.form import FormContainer, FormField
from searchpro.tabs.base import BaseTabHandler

GOOGLE_SHEETS_FIELD = "googleSheets.useGoogleSheetData"
LOCAL_CSV_FIELD = "googleSheets.useLocalCSV"
URL_FIELDS = frozenset({"googleSheets.googleSheetUrl", "googleSheets.localCSVUrl"})
HTTP_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)


class DataSourcesTabHandler(BaseTabHandler):
    """数据源设置"""

    TAB_ID = "data-sources"
    TITLE = "Data Sources"
    SECTIONS = ("googleSheets",)

    def setup(self, container: FormContainer) -> None:
        container.add_change_listener(self._enforce_exclusive_sources)

    def _enforce_exclusive_sources(self, form_field: FormField) -> None:
        exclusive = {GOOGLE_SHEETS_FIELD: LOCAL_CSV_FIELD, LOCAL_CSV_FIELD: GOOGLE_SHEETS_FIELD}
        other = exclusive.get(form_field.name)
        if other is None or not form_field.checked:
            return

        core = self._require_core()
        if core.get_nested_property(other):
            core.safe_set_nested_property(other, False)
            if self.container is not None and other in self.container:
                self.container.get(other).checked = False
            self.logger.info("Disabled competing data source", disabled=other)

    def check_field(self, form_field: FormField) -> Optional[str]:
        if form_field.name in URL_FIELDS:
            value = str(form_field.value).strip()
            if value and not HTTP_URL.match(value):
                return "Enter a full http(s) URL"
        return None
