"""实时预览同步

对字段编辑做防抖，在定时器触发时生成不可变的预览快照，持久化并通知父级上下文。

状态机：IDLE -> PENDING -> COMMITTED。

防抖策略：
    SHARED      所有字段共用一个定时器，窗口内任何编辑都会重启它，
                只有最后一次编辑的 (path, value) 触发提交。默认策略。
    PER_FIELD   每个字段路径一个定时器，不同字段各自独立提交。
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Tuple

from searchpro.core.channels import PREVIEW_MESSAGE_TYPE, DetachedChannel, PreviewChannel
from searchpro.core.config_store import ConfigStore
from searchpro.core.hook_manager import HookManager, PreviewEvents
from searchpro.core.logger import get_logger
from searchpro.core.property_guard import MAX_KEY_LENGTH
from searchpro.core.scheduler import ManualScheduler, TimerHandle, TimerScheduler
from searchpro.core.storage import LIVE_CONFIG_KEY, SafeStorage

logger = get_logger("preview_sync")

PREVIEW_DEBOUNCE_MS = 300
RANGE_DEBOUNCE_MS = 150

_SHARED_KEY = "__shared__"


class SyncState(Enum):
    """预览同步状态"""
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"


class DebouncePolicy(Enum):
    """防抖策略"""
    SHARED = "shared"
    PER_FIELD = "per_field"


@dataclass(frozen=True)
class PreviewSnapshot:
    """预览快照

    配置以 JSON 文本保存，每次访问 config 都得到新的副本，快照本身不可修改。
    """
    payload: str
    field: str
    value: Any
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    @classmethod
    def create(cls, config: Dict[str, Any], field_name: str, value: Any) -> 'PreviewSnapshot':
        return cls(payload=json.dumps(config, ensure_ascii=False), field=field_name, value=value)

    @property
    def config(self) -> Dict[str, Any]:
        """配置树副本"""
        return json.loads(self.payload)

    def to_message(self) -> Dict[str, Any]:
        """转换为发往父级上下文的消息"""
        return {
            "type": PREVIEW_MESSAGE_TYPE,
            "config": self.config,
            "field": self.field,
            "value": self.value,
        }


class PreviewSync:
    """实时预览同步器"""

    def __init__(
        self,
        store: ConfigStore,
        storage: Optional[SafeStorage] = None,
        channel: Optional[PreviewChannel] = None,
        scheduler: Optional[TimerScheduler] = None,
        policy: DebouncePolicy = DebouncePolicy.SHARED,
        delay_ms: float = PREVIEW_DEBOUNCE_MS,
        hooks: Optional[HookManager] = None,
    ):
        """初始化预览同步器

        Args:
            store: 配置存储，提交时从中克隆权威配置树
            storage: 快照持久化存储
            channel: 父级上下文消息通道
            scheduler: 定时器调度器
            policy: 防抖策略
            delay_ms: 默认防抖窗口（毫秒）
            hooks: 钩子管理器，提交和跳过时触发事件
        """
        self.store = store
        self.storage = storage or SafeStorage(sanitizer=store.sanitizer)
        self.channel = channel or DetachedChannel()
        self.scheduler = scheduler or ManualScheduler()
        self.policy = policy
        self.delay_ms = delay_ms
        self.hooks = hooks or HookManager()

        self._timers: Dict[Hashable, TimerHandle] = {}
        self._pending: Dict[Hashable, Tuple[str, Any]] = {}
        self._deliveries: Dict[int, TimerHandle] = {}
        self._closed = False

        self.last_snapshot: Optional[PreviewSnapshot] = None
        self.commit_count = 0

    @property
    def state(self) -> SyncState:
        """当前状态"""
        if self._pending:
            return SyncState.PENDING
        if self.last_snapshot is not None:
            return SyncState.COMMITTED
        return SyncState.IDLE

    @property
    def pending_fields(self) -> Tuple[str, ...]:
        """等待提交的字段路径"""
        return tuple(path for path, _ in self._pending.values())

    def schedule(self, path: Any, value: Any, delay_ms: Optional[float] = None) -> None:
        """登记一次字段编辑并（重新）启动防抖定时器

        Args:
            path: 字段路径
            value: 字段值
            delay_ms: 本次使用的防抖窗口，默认使用构造时的窗口
        """
        if self._closed:
            logger.debug("Preview sync closed, edit ignored", field=str(path))
            return

        path_text = str(path)
        key = _SHARED_KEY if self.policy == DebouncePolicy.SHARED else path_text
        delay = self.delay_ms if delay_ms is None else delay_ms

        self._pending[key] = (path_text, value)
        self._timers[key] = self.scheduler.reschedule(
            self._timers.get(key), delay, lambda: self._fire(key)
        )

    def flush(self) -> None:
        """立即提交所有等待中的编辑"""
        for key in list(self._pending.keys()):
            self.scheduler.cancel(self._timers.get(key))
            self._fire(key)

    def cancel(self, path: Any) -> None:
        """取消某个字段的等待中编辑（共享策略下取消共享定时器）"""
        key = _SHARED_KEY if self.policy == DebouncePolicy.SHARED else str(path)
        self.scheduler.cancel(self._timers.pop(key, None))
        self._pending.pop(key, None)

    def cancel_all(self) -> None:
        """取消所有等待中的编辑和尚未送达的消息"""
        for handle in self._timers.values():
            self.scheduler.cancel(handle)
        for handle in self._deliveries.values():
            self.scheduler.cancel(handle)
        self._timers.clear()
        self._pending.clear()
        self._deliveries.clear()

    def close(self) -> None:
        """结束编辑会话，释放所有定时器，之后的编辑被忽略"""
        self.cancel_all()
        self._closed = True
        logger.debug("Preview sync closed")

    def _fire(self, key: Hashable) -> None:
        self._timers.pop(key, None)
        entry = self._pending.pop(key, None)
        if entry is None:
            return
        path, value = entry
        self.commit(path, value)

    def commit(self, path: Any, value: Any) -> Optional[PreviewSnapshot]:
        """生成、持久化并广播预览快照

        持久化失败不会回滚权威配置树，也不会阻止广播。

        Returns:
            新快照；路径被拒绝或快照未通过校验时返回 None
        """
        clone = self.store.snapshot()
        if not self.store.accessor.set(clone, path, value):
            logger.warning("Live preview skipped, property rejected", field=str(path))
            self.hooks.trigger_hook(PreviewEvents.SKIPPED, str(path))
            return None

        if not self.store.sanitizer.sanitize_tree_in_place(clone, self.store.max_depth):
            logger.security("Live preview skipped, snapshot failed validation", field=str(path))
            self.hooks.trigger_hook(PreviewEvents.SKIPPED, str(path))
            return None

        sanitizer = self.store.sanitizer
        snapshot = PreviewSnapshot.create(
            clone,
            field_name=sanitizer.sanitize_text(str(path), MAX_KEY_LENGTH),
            value=sanitizer.sanitize_value(value),
        )
        self.last_snapshot = snapshot
        self.commit_count += 1

        if not self.storage.set(LIVE_CONFIG_KEY, clone):
            logger.warning("Live preview not persisted", field=snapshot.field)
            self.hooks.trigger_hook(PreviewEvents.PERSIST_FAILED, snapshot)

        self.broadcast(snapshot.to_message())

        logger.debug("Live preview committed", field=snapshot.field)
        self.hooks.trigger_hook(PreviewEvents.COMMITTED, snapshot)
        return snapshot

    def broadcast(self, message: Dict[str, Any]) -> None:
        """在下一轮调度中把消息发给父级上下文，不等待结果"""
        if not self.channel.is_nested:
            return
        handle: Optional[TimerHandle] = None

        def _post() -> None:
            if handle is not None:
                self._deliveries.pop(handle.timer_id, None)
            try:
                self.channel.post_message(message)
            except Exception as e:
                logger.warning("Error posting message to parent", error=str(e))

        handle = self.scheduler.schedule(0, _post)
        if handle.active:
            self._deliveries[handle.timer_id] = handle
