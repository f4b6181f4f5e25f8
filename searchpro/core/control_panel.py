"""控制面板核心

把配置存储、标签页注册表、实时预览、持久化存储和通知器组装在一起，
为标签页处理器提供统一的核心服务，并实现表单编辑、应用、重置和载入流程。
"""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from searchpro.core.assets import ensure_asset_prefix, is_thumbnail_asset_field, strip_asset_prefix
from searchpro.core.channels import UPDATE_MESSAGE_TYPE, DetachedChannel, PreviewChannel
from searchpro.core.config_store import ConfigStore
from searchpro.core.exceptions import ConfigIOError, ConfigParseError, UnsafeContentError
from searchpro.core.field_validator import FieldValidation, FieldValidator
from searchpro.core.form import (
    CHECKBOX, COLOR, NUMERIC_TYPES, FormContainer, FormField, parse_number,
)
from searchpro.core.hook_manager import ConfigEvents, HookManager
from searchpro.core.interfaces.core import IControlPanelCore
from searchpro.core.logger import Logger, get_logger
from searchpro.core.notifier import DEFAULT_TOAST_DURATION_MS, LoggingNotifier, Toast, ToastNotifier
from searchpro.core.preview_sync import PREVIEW_DEBOUNCE_MS, DebouncePolicy, PreviewSync
from searchpro.core.property_guard import MAX_KEY_LENGTH
from searchpro.core.scheduler import ManualScheduler, TimerScheduler
from searchpro.core.storage import (
    APPLIED_CONFIG_KEY,
    CONFIG_UPDATE_KEY,
    CONTROL_PANEL_KEYS,
    LIVE_CONFIG_KEY,
    InMemoryStorage,
    KeyValueStorage,
    SafeStorage,
    VersionedSettingsStore,
)
from searchpro.core.tab_registry import TabHandlerRegistry

# 留空时写入 None 的可选定位字段
NULLABLE_FIELDS = frozenset({
    "positionLeft",
    "positionBottom",
    "searchBar.position.left",
    "searchBar.position.bottom",
})

# 展示为 "<n>px" 的数值字段
PIXEL_FIELDS = frozenset({"searchBar.width"})

TOAST_TYPE_MAX_LENGTH = 20


def _as_number(number: float) -> Any:
    return int(number) if number.is_integer() else number


def split_list_value(text: str) -> List[str]:
    """把逗号分隔的文本拆分为列表，去掉空项"""
    return [item.strip() for item in text.split(",") if item.strip()]


class ControlPanelCore(IControlPanelCore):
    """控制面板核心"""

    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        backend: Optional[KeyValueStorage] = None,
        channel: Optional[PreviewChannel] = None,
        scheduler: Optional[TimerScheduler] = None,
        notifier: Optional[ToastNotifier] = None,
        policy: DebouncePolicy = DebouncePolicy.SHARED,
        preview_delay_ms: float = PREVIEW_DEBOUNCE_MS,
    ):
        """初始化控制面板核心

        Args:
            store: 配置存储
            backend: 键值存储后端，默认使用内存存储
            channel: 父级上下文消息通道
            scheduler: 定时器调度器，默认使用虚拟时钟
            notifier: 提示通知器
            policy: 实时预览防抖策略
            preview_delay_ms: 实时预览防抖窗口（毫秒）
        """
        self.store = store or ConfigStore()
        self.accessor = self.store.accessor
        self.sanitizer = self.store.sanitizer
        self.backend = backend or InMemoryStorage()
        self.storage = SafeStorage(self.backend, self.sanitizer)
        self.settings = VersionedSettingsStore(self.backend)
        self.channel = channel or DetachedChannel()
        self.scheduler = scheduler or ManualScheduler()
        self.notifier = notifier or LoggingNotifier()
        self.hooks = HookManager()
        self.validator = FieldValidator(self.sanitizer)
        self.preview = PreviewSync(
            self.store,
            storage=self.storage,
            channel=self.channel,
            scheduler=self.scheduler,
            policy=policy,
            delay_ms=preview_delay_ms,
            hooks=self.hooks,
        )
        self.registry = TabHandlerRegistry(self)
        self._containers: List[FormContainer] = []
        self.logger = get_logger(__name__).bind(component="control_panel")

    @property
    def config(self) -> Dict[str, Any]:
        """权威配置树（引用）"""
        return self.store.tree

    # ------------------------------------------------------------------
    # 核心服务
    # ------------------------------------------------------------------

    def sanitize_input(self, value: Any, max_length: Optional[int] = None) -> str:
        return self.sanitizer.sanitize_text(value, max_length)

    def get_nested_property(self, path: Any) -> Any:
        return self.store.get(path)

    def safe_set_nested_property(self, path: Any, value: Any) -> bool:
        return self.store.set(path, value)

    def get_default_config(self) -> Dict[str, Any]:
        return self.store.factory_defaults()

    def safe_storage_get(self, key: str, default: Any = None) -> Any:
        return self.storage.get(key, default)

    def safe_storage_set(self, key: str, value: Any) -> bool:
        return self.storage.set(key, value)

    def show_toast(self, title: str, message: str, level: str = "info",
                   duration_ms: int = DEFAULT_TOAST_DURATION_MS) -> None:
        """显示提示，所有文本先经过净化"""
        toast = Toast(
            level=self.sanitize_input(level, TOAST_TYPE_MAX_LENGTH),
            title=self.sanitize_input(title),
            message=self.sanitize_input(message),
            duration_ms=duration_ms,
        )
        try:
            self.notifier.notify(toast)
        except Exception as e:
            self.logger.error("Error showing toast", error=str(e))

    def register_tab(self, tab_id: str, handler: Any) -> None:
        """注册标签页处理器"""
        self.registry.register(tab_id, handler)

    # ------------------------------------------------------------------
    # 表单
    # ------------------------------------------------------------------

    def setup_form_listeners(self, container: FormContainer) -> None:
        """让表单的每次提交进入 on_form_change，连续输入只做验证"""
        container.add_change_listener(self.on_form_change)
        container.add_input_listener(self.on_form_input)
        if container not in self._containers:
            self._containers.append(container)
        self.logger.debug("Form listeners set up", form=container.name, fields=len(container))

    def populate_form(self, container: FormContainer) -> None:
        """用当前配置树填充表单字段，配置树中不存在的路径保持原值"""
        for form_field in container:
            if not self.accessor.contains(self.config, form_field.name):
                continue
            self._populate_field(form_field, self.accessor.get(self.config, form_field.name))
        self.logger.debug("Form populated", form=container.name)

    def _populate_field(self, form_field: FormField, value: Any) -> None:
        name = form_field.name

        if form_field.type == CHECKBOX:
            form_field.checked = bool(value)
        elif form_field.type in NUMERIC_TYPES:
            form_field.value = "" if value is None else str(value)
        elif form_field.type == COLOR:
            form_field.value = value or "#000000"
        elif form_field.multiple:
            if isinstance(value, list):
                form_field.value = [option for option in form_field.options if option in value]
        elif name in PIXEL_FIELDS and isinstance(value, (int, float)) and not isinstance(value, bool):
            form_field.value = f"{value}px"
        elif isinstance(value, list):
            form_field.value = ", ".join(str(item) for item in value if item and str(item).strip())
        else:
            text = "" if value is None else str(value)
            form_field.value = strip_asset_prefix(text) if is_thumbnail_asset_field(name) else text

    def on_form_change(self, form_field: FormField, preview_delay_ms: Optional[float] = None) -> bool:
        """处理一次字段编辑：写入配置树、验证字段并安排实时预览

        Args:
            form_field: 发生变更的字段
            preview_delay_ms: 本次实时预览的防抖窗口

        Returns:
            配置树被更新返回 True
        """
        if not self.apply_field(form_field):
            return False

        name = self.sanitize_input(form_field.name, MAX_KEY_LENGTH)
        self.validate_field(form_field)
        self.request_preview(name, self.store.get(name), preview_delay_ms)
        self.logger.debug("Config updated from form", field=name)
        return True

    def on_form_input(self, form_field: FormField) -> None:
        """连续输入时只做实时验证"""
        self.validate_field(form_field)

    def apply_field(self, form_field: FormField) -> bool:
        """把字段值转换后写入配置树，不触发预览

        写入失败时配置树保持原值，字段被标记为无效。
        """
        name = self.sanitize_input(form_field.name, MAX_KEY_LENGTH)
        value = form_field.current_value

        texts = value if isinstance(value, list) else [value]
        for text in texts:
            try:
                self.sanitizer.check_content(text, field=name)
            except UnsafeContentError as e:
                self.logger.security("Unsafe content detected in form input", field=e.field)
                form_field.mark_invalid("Invalid content detected")
                return False

        if name in NULLABLE_FIELDS and value == "":
            value = None

        if form_field.type in NUMERIC_TYPES and value not in ("", None):
            number = parse_number(value)
            if number is None:
                self.logger.security("Invalid numeric value detected", field=name)
                form_field.mark_invalid("Must be a valid number")
                return False
            value = _as_number(number)

        if isinstance(value, str) and isinstance(self.store.get(name), list):
            value = split_list_value(value)

        if isinstance(value, str) and is_thumbnail_asset_field(name):
            value = ensure_asset_prefix(value)

        if not self.store.set(name, value):
            self.logger.security("Failed to set property safely", field=name)
            form_field.mark_invalid("Setting could not be saved")
            return False
        return True

    def validate_field(self, form_field: FormField) -> FieldValidation:
        return self.validator.validate_field(form_field)

    def request_preview(self, path: str, value: Any, delay_ms: Optional[float] = None) -> None:
        """安排一次实时预览"""
        self.preview.schedule(path, value, delay_ms)

    # ------------------------------------------------------------------
    # 会话生命周期
    # ------------------------------------------------------------------

    def start_session(self, session_id: Optional[str] = None) -> bool:
        """开始编辑会话

        丢弃过期版本的设置，并用上次持久化的实时预览快照覆盖默认配置。

        Returns:
            恢复了持久化快照返回 True
        """
        Logger.set_session_id(session_id or uuid.uuid4().hex[:12])
        self.settings.discard_outdated()

        live = self.storage.get(LIVE_CONFIG_KEY)
        if not isinstance(live, dict):
            return False

        restored = self.store.load_tree(live)
        if restored:
            self.logger.info("Restored live preview snapshot")
        return restored

    def load_config(self, candidate: Any) -> bool:
        """载入配置对象，成功后重新填充已知表单"""
        if not self.store.load_tree(candidate):
            self.show_toast("Load Failed", "Configuration file failed validation", "error")
            self.hooks.trigger_hook(ConfigEvents.LOAD_FAILED, "validation")
            return False

        for container in self._containers:
            self.populate_form(container)

        self.show_toast("Configuration Loaded", "Settings loaded from file", "success")
        self.hooks.trigger_hook(ConfigEvents.LOADED, self.store.snapshot())
        return True

    def load_config_file(self, path: Path) -> bool:
        """从文件载入配置，失败时配置树保持不变"""
        try:
            candidate = self.store.load_file(path)
        except (ConfigParseError, ConfigIOError) as e:
            self.logger.error("Error loading config file", path=str(path), error=e.message)
            self.show_toast("Load Failed", e.message, "error")
            self.hooks.trigger_hook(ConfigEvents.LOAD_FAILED, e.message)
            return False
        return self.load_config(candidate)

    def apply_settings(self, containers: Optional[Dict[str, FormContainer]] = None) -> bool:
        """把当前配置应用到搜索组件

        所有标签页验证通过后，写入应用配置、实时配置和更新时间戳，并通知父级上下文。
        """
        if not self.registry.validate_all(containers):
            self.show_toast("Validation Error", "Please fix the highlighted fields", "error")
            return False

        self.preview.flush()
        cfg = self.store.snapshot()
        if not self.sanitizer.sanitize_tree_in_place(cfg, self.store.max_depth):
            self.show_toast("Apply Failed", "Configuration failed security validation", "error")
            return False

        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        stored = all([
            self.storage.set(LIVE_CONFIG_KEY, cfg),
            self.storage.set(APPLIED_CONFIG_KEY, cfg),
            self.storage.set(CONFIG_UPDATE_KEY, timestamp),
        ])
        self.settings.save(cfg)

        if not stored:
            self.logger.warning("Applied settings not fully persisted")

        self.preview.broadcast({"type": UPDATE_MESSAGE_TYPE, "config": cfg})
        self.show_toast("Settings Applied", "Search settings have been applied", "success")
        self.hooks.trigger_hook(ConfigEvents.APPLIED, cfg)
        return True

    def reset_all(self) -> None:
        """完全重置：清除控制面板存储键，恢复出厂配置并重置每个标签页"""
        self.preview.cancel_all()
        for key in CONTROL_PANEL_KEYS:
            self.storage.remove(key)
        self.settings.clear()

        self.store.reset_all()
        self.registry.reset_all()

        for container in self._containers:
            self.populate_form(container)

        self.show_toast("Reset Complete", "All settings restored to defaults", "success")
        self.hooks.trigger_hook(ConfigEvents.RESET, None)

    def reset_section(self, section_path: str) -> bool:
        """把单个配置段恢复为默认值"""
        if not self.store.reset_subtree(section_path):
            return False
        self.hooks.trigger_hook(ConfigEvents.RESET, section_path)
        return True

    def close(self) -> None:
        """结束编辑会话，释放定时器和标签页资源"""
        self.preview.close()
        self.registry.cleanup_all()
        for container in self._containers:
            container.remove_change_listener(self.on_form_change)
            container.remove_input_listener(self.on_form_input)
        self._containers.clear()
        Logger.clear_context()
        self.logger.info("Control panel closed")
