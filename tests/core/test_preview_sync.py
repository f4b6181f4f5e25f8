"""实时预览同步的单元测试"""

import json
from unittest.mock import MagicMock

import pytest

from searchpro.core.channels import PREVIEW_MESSAGE_TYPE, RecordingChannel
from searchpro.core.config_store import ConfigStore
from searchpro.core.hook_manager import PreviewEvents
from searchpro.core.preview_sync import (
    PREVIEW_DEBOUNCE_MS,
    DebouncePolicy,
    PreviewSnapshot,
    PreviewSync,
    SyncState,
)
from searchpro.core.scheduler import ManualScheduler
from searchpro.core.storage import LIVE_CONFIG_KEY, InMemoryStorage, SafeStorage


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def backend():
    return InMemoryStorage()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def channel():
    return RecordingChannel(nested=True)


@pytest.fixture
def sync(store, backend, scheduler, channel):
    """默认（共享定时器）策略的预览同步器"""
    return PreviewSync(store, SafeStorage(backend), channel, scheduler)


def _edit(store, sync, path, value, delay_ms=None):
    store.set(path, value)
    sync.schedule(path, value, delay_ms)


class TestDebounce:
    """测试防抖"""

    def test_edits_within_window_coalesce(self, store, sync, scheduler, channel):
        """测试窗口内的连续编辑只提交一次，使用最后的值"""
        _edit(store, sync, "searchBar.width", 100)
        scheduler.advance(100)
        _edit(store, sync, "searchBar.width", 200)
        scheduler.advance(100)
        _edit(store, sync, "searchBar.width", 300)

        scheduler.advance(PREVIEW_DEBOUNCE_MS - 1)
        assert sync.commit_count == 0

        scheduler.advance(1)
        assert sync.commit_count == 1
        assert sync.last_snapshot.value == 300
        assert len(channel.messages) == 1

    def test_shared_policy_includes_other_fields(self, store, sync, scheduler, channel):
        """测试共享策略下窗口内编辑的其他字段也出现在快照中"""
        _edit(store, sync, "searchBar.width", 420)
        _edit(store, sync, "animations.enabled", True)

        scheduler.advance(PREVIEW_DEBOUNCE_MS)

        assert sync.commit_count == 1
        snapshot = sync.last_snapshot
        assert snapshot.field == "animations.enabled"
        assert snapshot.config["searchBar"]["width"] == 420
        assert snapshot.config["animations"]["enabled"] is True

    def test_per_field_policy_commits_each_field(self, store, backend, scheduler, channel):
        """测试按字段策略下不同字段各自提交"""
        sync = PreviewSync(store, SafeStorage(backend), channel, scheduler, policy=DebouncePolicy.PER_FIELD)

        _edit(store, sync, "searchBar.width", 420)
        _edit(store, sync, "animations.enabled", True)
        scheduler.advance(PREVIEW_DEBOUNCE_MS)

        assert sync.commit_count == 2
        assert [message["field"] for message, _ in channel.messages] == ["searchBar.width", "animations.enabled"]

    def test_per_call_delay(self, store, sync, scheduler):
        """测试单次调用使用更短的窗口"""
        _edit(store, sync, "animations.duration.fast", 120, delay_ms=150)

        scheduler.advance(150)
        assert sync.commit_count == 1

    def test_state_transitions(self, store, sync, scheduler):
        """测试 IDLE -> PENDING -> COMMITTED"""
        assert sync.state == SyncState.IDLE

        _edit(store, sync, "searchBar.width", 400)
        assert sync.state == SyncState.PENDING
        assert sync.pending_fields == ("searchBar.width",)

        scheduler.advance(PREVIEW_DEBOUNCE_MS)
        assert sync.state == SyncState.COMMITTED
        assert sync.pending_fields == ()


class TestCommit:
    """测试提交"""

    def test_commit_persists_snapshot(self, store, sync, scheduler, backend):
        """测试快照保存到实时配置键"""
        _edit(store, sync, "searchBar.width", 410)
        scheduler.advance(PREVIEW_DEBOUNCE_MS)

        persisted = json.loads(backend.get_item(LIVE_CONFIG_KEY))
        assert persisted["searchBar"]["width"] == 410

    def test_message_shape(self, store, sync, scheduler, channel):
        """测试发往父级的消息格式"""
        _edit(store, sync, "searchBar.placeholder", "Find <it>")
        scheduler.advance(PREVIEW_DEBOUNCE_MS)

        message, origin = channel.messages[0]
        assert origin == "*"
        assert message["type"] == PREVIEW_MESSAGE_TYPE
        assert message["field"] == "searchBar.placeholder"
        assert message["value"] == "Find &lt;it&gt;"
        assert message["config"]["searchBar"]["placeholder"] == "Find &lt;it&gt;"

    def test_message_is_delivered_asynchronously(self, store, sync, channel):
        """测试消息在提交之后的下一轮调度中才发出"""
        sync.commit("searchBar.width", 400)

        assert channel.messages == []
        sync.scheduler.advance(0)
        assert len(channel.messages) == 1

    def test_detached_channel_posts_nothing(self, store, backend, scheduler):
        """测试顶层运行时不发消息但仍然持久化"""
        channel = RecordingChannel(nested=False)
        sync = PreviewSync(store, SafeStorage(backend), channel, scheduler)

        sync.commit("searchBar.width", 400)
        scheduler.advance(10)

        assert channel.messages == []
        assert backend.get_item(LIVE_CONFIG_KEY) is not None

    def test_commit_does_not_touch_canonical_tree(self, store, sync):
        """测试提交只修改克隆"""
        sync.commit("searchBar.width", 999)
        assert store.get("searchBar.width") == 350

    def test_snapshot_is_immutable(self, store, sync):
        """测试快照不可修改"""
        snapshot = sync.commit("searchBar.width", 400)

        snapshot.config["searchBar"]["width"] = 1
        assert snapshot.config["searchBar"]["width"] == 400
        with pytest.raises(AttributeError):
            snapshot.field = "other"

    def test_rejected_path_skips_commit(self, sync, channel):
        """测试不安全路径不提交"""
        assert sync.commit("__proto__.polluted", True) is None
        assert sync.commit_count == 0

    def test_unsafe_snapshot_skips_commit(self, store, sync, backend):
        """测试快照未通过校验时跳过提交"""
        store.tree["searchBar"]["placeholder"] = "javascript:alert(1)"

        assert sync.commit("searchBar.width", 400) is None
        assert backend.get_item(LIVE_CONFIG_KEY) is None

    def test_persist_failure_still_broadcasts(self, store, scheduler, channel):
        """测试持久化失败不阻止广播，也不回滚配置树"""
        storage = MagicMock()
        storage.set.return_value = False
        sync = PreviewSync(store, storage, channel, scheduler)

        snapshot = sync.commit("searchBar.width", 400)
        scheduler.advance(0)

        assert snapshot is not None
        assert len(channel.messages) == 1

    def test_channel_error_is_contained(self, store, scheduler):
        """测试通道异常被吸收"""
        channel = MagicMock()
        channel.is_nested = True
        channel.post_message.side_effect = RuntimeError("gone")
        sync = PreviewSync(store, channel=channel, scheduler=scheduler)

        sync.commit("searchBar.width", 400)
        scheduler.advance(0)

        channel.post_message.assert_called_once()

    def test_hooks_fire(self, store, sync):
        """测试提交和跳过事件"""
        committed, skipped = [], []
        sync.hooks.register_hook(PreviewEvents.COMMITTED, committed.append)
        sync.hooks.register_hook(PreviewEvents.SKIPPED, skipped.append)

        sync.commit("searchBar.width", 400)
        sync.commit("constructor.x", 1)

        assert len(committed) == 1 and isinstance(committed[0], PreviewSnapshot)
        assert skipped == ["constructor.x"]


class TestLifecycle:
    """测试 flush / cancel / close"""

    def test_flush_commits_immediately(self, store, sync, scheduler):
        """测试 flush 立即提交"""
        _edit(store, sync, "searchBar.width", 400)

        sync.flush()

        assert sync.commit_count == 1
        scheduler.advance(PREVIEW_DEBOUNCE_MS)
        assert sync.commit_count == 1

    def test_cancel_all(self, store, sync, scheduler, channel):
        """测试取消后不再提交"""
        _edit(store, sync, "searchBar.width", 400)
        sync.cancel_all()
        scheduler.advance(1000)

        assert sync.commit_count == 0
        assert sync.state == SyncState.IDLE

    def test_close_drops_undelivered_messages_and_later_edits(self, store, sync, scheduler, channel):
        """测试关闭后未送达的消息和之后的编辑都被丢弃"""
        sync.commit("searchBar.width", 400)
        sync.close()
        _edit(store, sync, "searchBar.width", 500)
        scheduler.advance(1000)

        assert channel.messages == []
        assert sync.commit_count == 1
        assert scheduler.pending_count == 0

    def test_cancel_single_field(self, store, backend, scheduler, channel):
        """测试按字段取消"""
        sync = PreviewSync(store, SafeStorage(backend), channel, scheduler, policy=DebouncePolicy.PER_FIELD)
        _edit(store, sync, "searchBar.width", 400)
        _edit(store, sync, "animations.enabled", True)

        sync.cancel("searchBar.width")
        scheduler.advance(PREVIEW_DEBOUNCE_MS)

        assert sync.commit_count == 1
        assert sync.last_snapshot.field == "animations.enabled"
