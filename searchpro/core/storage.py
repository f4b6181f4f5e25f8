"""持久化存储

键值存储抽象（浏览器 localStorage 的对应物）、带安全检查的读写包装，
以及带版本号的设置存储。存储被视为不可靠资源：失败只记录日志，不重试。
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from searchpro.core.exceptions import StorageException, StorageQuotaError, StorageUnavailableError
from searchpro.core.logger import get_logger
from searchpro.core.sanitizer import ContentSanitizer

logger = get_logger("storage")

MAX_STORAGE_BYTES = 1024 * 1024
MAX_STORAGE_KEY_LENGTH = 100

LIVE_CONFIG_KEY = "searchProLiveConfig"
APPLIED_CONFIG_KEY = "searchProConfig"
CONFIG_UPDATE_KEY = "searchProConfigUpdate"
SETTINGS_KEY = "searchPro.config"
SETTINGS_VERSION = "2.0.1"

# 完全重置时需要清除的键
CONTROL_PANEL_KEYS = (
    APPLIED_CONFIG_KEY,
    LIVE_CONFIG_KEY,
    "searchProSettings",
    "controlPanelState",
    "sidebarCollapsed",
    "currentTab",
    "lastAppliedConfig",
    "configBackup",
)


def serialized_size(value: Any) -> int:
    """返回值序列化为 JSON 后的 UTF-8 字节数"""
    return len(json.dumps(value, ensure_ascii=False).encode("utf-8"))


class KeyValueStorage(ABC):
    """键值存储接口"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """读取键，不存在返回 None"""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """写入键"""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """删除键，不存在时忽略"""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """列出所有键"""
        pass


class InMemoryStorage(KeyValueStorage):
    """内存存储，会话结束即丢失"""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())


class JsonFileStorage(KeyValueStorage):
    """以单个 JSON 文件保存全部键值"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Storage file unreadable, starting empty", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._items, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write storage file: {e}", details=str(self.path))

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._write()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write()

    def keys(self) -> List[str]:
        return list(self._items.keys())


class SafeStorage:
    """带安全检查的存储包装

    写入前检查大小并净化字符串，读取时对对象值做整树校验。
    所有方法都不会向调用方抛出存储异常。
    """

    def __init__(
        self,
        backend: Optional[KeyValueStorage] = None,
        sanitizer: Optional[ContentSanitizer] = None,
        max_bytes: int = MAX_STORAGE_BYTES,
    ):
        self.backend = backend or InMemoryStorage()
        self.sanitizer = sanitizer or ContentSanitizer()
        self.max_bytes = max_bytes

    def _safe_key(self, key: Any) -> str:
        return self.sanitizer.sanitize_text(key, MAX_STORAGE_KEY_LENGTH)

    def set(self, key: str, value: Any) -> bool:
        """安全写入

        Returns:
            写入成功返回 True
        """
        safe_key = self._safe_key(key)
        try:
            if isinstance(value, str):
                payload = self.sanitizer.sanitize_text(value)
            elif isinstance(value, (dict, list)):
                payload = json.dumps(value, ensure_ascii=False)
                size = len(payload.encode("utf-8"))
                if size > self.max_bytes:
                    raise StorageQuotaError("Configuration too large for storage", size=size, limit=self.max_bytes)
            else:
                payload = json.dumps(value)

            self.backend.set_item(safe_key, payload)
            return True
        except StorageQuotaError as e:
            logger.security("Storage quota exceeded", key=safe_key, size=e.size, limit=e.limit)
            return False
        except (StorageException, TypeError, ValueError) as e:
            logger.error("Error writing storage", key=safe_key, error=str(e))
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """安全读取

        对象值必须通过整树校验，否则返回默认值；非 JSON 文本按字符串净化后返回。
        """
        safe_key = self._safe_key(key)
        try:
            raw = self.backend.get_item(safe_key)
        except StorageException as e:
            logger.error("Error reading storage", key=safe_key, error=str(e))
            return default

        if raw is None:
            return default

        try:
            parsed = json.loads(raw)
        except ValueError:
            return self.sanitizer.sanitize_text(raw)

        if isinstance(parsed, dict):
            if self.sanitizer.sanitize_tree_in_place(parsed):
                return parsed
            logger.security("Stored object failed validation", key=safe_key)
            return default
        return self.sanitizer.sanitize_value(parsed)

    def remove(self, key: str) -> None:
        """删除键，失败只记录日志"""
        safe_key = self._safe_key(key)
        try:
            self.backend.remove_item(safe_key)
        except StorageException as e:
            logger.warning("Could not clear storage key", key=safe_key, error=str(e))


class VersionedSettingsStore:
    """带版本号的设置存储

    存储格式为 {version, timestamp, settings}，版本不一致的数据在会话开始时被丢弃。
    """

    def __init__(
        self,
        backend: KeyValueStorage,
        storage_key: str = SETTINGS_KEY,
        version: str = SETTINGS_VERSION,
    ):
        self.backend = backend
        self.storage_key = storage_key
        self.version = version

    def save(self, settings: Dict[str, Any]) -> bool:
        """保存设置"""
        if not isinstance(settings, dict):
            logger.error("Invalid settings object", type=type(settings).__name__)
            return False

        data = {
            "version": self.version,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "settings": settings,
        }
        try:
            self.backend.set_item(self.storage_key, json.dumps(data, ensure_ascii=False))
            return True
        except (StorageException, TypeError, ValueError) as e:
            logger.error("Failed to save settings", error=str(e))
            return False

    def load(self) -> Optional[Dict[str, Any]]:
        """读取当前版本的设置，不存在、损坏或版本不一致时返回 None"""
        data = self._read()
        if data is None or data.get("version") != self.version:
            return None
        settings = data.get("settings")
        return settings if isinstance(settings, dict) else None

    def clear(self) -> None:
        """清除设置"""
        try:
            self.backend.remove_item(self.storage_key)
        except StorageException as e:
            logger.warning("Failed to clear settings", error=str(e))

    def discard_outdated(self) -> bool:
        """丢弃版本不一致或无法解析的设置

        Returns:
            发生丢弃时返回 True
        """
        raw = self.backend.get_item(self.storage_key)
        if raw is None:
            return False

        data = self._read()
        stored_version = data.get("version", "1.0.0") if data is not None else None
        if stored_version == self.version:
            return False

        logger.info("Outdated config version, resetting to defaults",
                    stored_version=stored_version, current_version=self.version)
        self.clear()
        return True

    def _read(self) -> Optional[Dict[str, Any]]:
        raw = self.backend.get_item(self.storage_key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Error parsing stored settings", error=str(e))
            return None
        return data if isinstance(data, dict) else None
