"""定时器调度器

把防抖延迟显式建模为 schedule / cancel 操作。提供两种实现：
虚拟时钟调度器（由宿主手动推进时间）和基于 asyncio 事件循环的调度器。
两者都在单线程内执行回调。
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from searchpro.core.logger import get_logger

logger = get_logger("scheduler")


class TimerHandle:
    """定时器句柄"""

    def __init__(self, timer_id: int, due_ms: float, callback: Callable[[], None]):
        self.timer_id = timer_id
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False
        self._native = None

    @property
    def active(self) -> bool:
        """尚未触发也未取消"""
        return not self.cancelled and not self.fired

    def __repr__(self) -> str:
        return f"TimerHandle(id={self.timer_id}, due_ms={self.due_ms}, active={self.active})"


class TimerScheduler(ABC):
    """定时器调度器接口"""

    @abstractmethod
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """在 delay_ms 毫秒后调用 callback"""
        pass

    @abstractmethod
    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """取消定时器，对已触发或已取消的句柄无效果"""
        pass

    def reschedule(
        self,
        handle: Optional[TimerHandle],
        delay_ms: float,
        callback: Callable[[], None],
    ) -> TimerHandle:
        """取消旧定时器并重新调度"""
        self.cancel(handle)
        return self.schedule(delay_ms, callback)


class ManualScheduler(TimerScheduler):
    """虚拟时钟调度器

    时间只在调用 advance 时前进，按到期时间和调度顺序依次执行回调。
    """

    def __init__(self):
        self.now_ms: float = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._ids = itertools.count(1)

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(next(self._ids), self.now_ms + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (handle.due_ms, handle.timer_id, handle))
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None and handle.active:
            handle.cancelled = True

    def advance(self, delta_ms: float) -> int:
        """推进虚拟时间并执行所有到期回调

        回调中新调度且在目标时间内到期的定时器也会被执行。

        Returns:
            本次执行的回调数量
        """
        target = self.now_ms + delta_ms
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due_ms, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self.now_ms = due_ms
            handle.fired = True
            fired += 1
            self._run(handle)

        self.now_ms = target
        return fired

    def run_pending(self) -> int:
        """执行所有未到期的定时器，时间推进到最后一个到期点"""
        fired = 0
        while self.pending_count:
            last_due = max(entry[0] for entry in self._queue if entry[2].active)
            fired += self.advance(max(0.0, last_due - self.now_ms))
        return fired

    @property
    def pending_count(self) -> int:
        """仍处于活动状态的定时器数量"""
        return sum(1 for _, _, handle in self._queue if handle.active)

    def _run(self, handle: TimerHandle) -> None:
        try:
            handle.callback()
        except Exception as e:
            logger.error("Timer callback failed", timer_id=handle.timer_id, error=str(e))


class AsyncioScheduler(TimerScheduler):
    """基于 asyncio 事件循环的调度器"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._ids = itertools.count(1)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        delay = max(0.0, delay_ms) / 1000.0
        handle = TimerHandle(next(self._ids), self.loop.time() * 1000.0 + delay * 1000.0, callback)

        def _fire() -> None:
            if not handle.active:
                return
            handle.fired = True
            try:
                callback()
            except Exception as e:
                logger.error("Timer callback failed", timer_id=handle.timer_id, error=str(e))

        handle._native = self.loop.call_later(delay, _fire)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is None or not handle.active:
            return
        handle.cancelled = True
        if handle._native is not None:
            handle._native.cancel()
