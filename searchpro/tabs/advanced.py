"""高级标签页

动画与搜索引擎参数。滑块拖动时按字段防抖，停顿 150 毫秒后才写入配置。
"""

from typing import Any, Dict, Optional

from searchpro.core.form import RANGE, FormContainer, FormField
from searchpro.core.preview_sync import RANGE_DEBOUNCE_MS
from searchpro.core.scheduler import TimerHandle, TimerScheduler
from searchpro.tabs.base import BaseTabHandler


class AdvancedTabHandler(BaseTabHandler):
    """高级设置"""

    TAB_ID = "advanced"
    TITLE = "Advanced"
    SECTIONS = ("animations", "searchSettings")

    def __init__(self, scheduler: Optional[TimerScheduler] = None, range_delay_ms: float = RANGE_DEBOUNCE_MS):
        super().__init__()
        self._scheduler = scheduler
        self.range_delay_ms = range_delay_ms
        self._range_timers: Dict[str, TimerHandle] = {}

    @property
    def scheduler(self) -> TimerScheduler:
        if self._scheduler is None:
            self._scheduler = getattr(self._require_core(), "scheduler")
        return self._scheduler

    @property
    def pending_ranges(self) -> int:
        return sum(1 for handle in self._range_timers.values() if handle.active)

    def setup(self, container: FormContainer) -> None:
        container.add_input_listener(self._on_range_input)

    def _on_range_input(self, form_field: FormField) -> None:
        if form_field.type != RANGE:
            return

        name = form_field.name
        self._range_timers[name] = self.scheduler.reschedule(
            self._range_timers.get(name),
            self.range_delay_ms,
            lambda: self._commit_range(form_field),
        )

    def _commit_range(self, form_field: FormField) -> None:
        self._range_timers.pop(form_field.name, None)
        self._require_core().on_form_change(form_field, self.range_delay_ms)

    def get_config_summary(self) -> Dict[str, Any]:
        summary = super().get_config_summary()
        summary["animationsEnabled"] = bool(self._require_core().get_nested_property("animations.enabled"))
        return summary

    def cleanup(self) -> None:
        for handle in self._range_timers.values():
            self.scheduler.cancel(handle)
        self._range_timers.clear()
        super().cleanup()
