"""配置存储

持有会话唯一的权威配置树，负责结构验证、载入、按子树重置以及配置文件的读写。
配置树的根对象在整个会话中保持不变，已持有引用的标签页处理器始终看到最新数据。
"""

import copy
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from searchpro.core.assets import ensure_asset_prefix
from searchpro.core.defaults import factory_defaults
from searchpro.core.exceptions import (
    BlockedPropertyError,
    ConfigIOError,
    ConfigParseError,
    ConfigValidationError,
    MalformedPathError,
    StorageQuotaError,
)
from searchpro.core.logger import get_logger
from searchpro.core.path_codec import parse
from searchpro.core.property_guard import check_path
from searchpro.core.sanitizer import DEFAULT_MAX_DEPTH, ContentSanitizer
from searchpro.core.storage import MAX_STORAGE_BYTES, serialized_size
from searchpro.core.tree_accessor import TreeAccessor

logger = get_logger("config_store")

_SCRIPT_ASSIGNMENT = re.compile(r"(?:window\.searchProConfig|module\.exports)\s*=\s*")

SCRIPT_HEADER = """/**
 * Search Pro Configuration
 * Generated on {generated}
 *
 * Include this file after the search script; the widget picks up
 * window.searchProConfig when the page finishes loading.
 */

"""

SCRIPT_FOOTER = """
// Node.js module export compatibility
if (typeof module !== 'undefined' && module.exports) { module.exports = window.searchProConfig; }
"""


def _dump_json(cfg: Dict[str, Any]) -> str:
    """导出 JSON；NaN 和无穷大不是合法 JSON，遇到时拒绝导出"""
    try:
        return json.dumps(cfg, ensure_ascii=False, indent=2, allow_nan=False)
    except ValueError as e:
        logger.error("Configuration contains non-finite number", error=str(e))
        raise ConfigValidationError("Configuration contains non-finite number", details=str(e))


class ConfigStore:
    """配置存储

    负责权威配置树的载入、验证、重置和导出。
    """

    # 预期存在的顶级配置段，缺失时只警告；同一组内任一名称存在即可
    WELL_KNOWN_SECTIONS = (
        ("searchBar",),
        ("appearance",),
        ("content", "includeContent"),
    )

    def __init__(
        self,
        accessor: Optional[TreeAccessor] = None,
        max_tree_bytes: int = MAX_STORAGE_BYTES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """初始化配置存储

        Args:
            accessor: 配置树访问器
            max_tree_bytes: 序列化后配置树的大小上限
            max_depth: 配置树最大嵌套深度
        """
        self.accessor = accessor or TreeAccessor()
        self.sanitizer: ContentSanitizer = self.accessor.sanitizer
        self.max_tree_bytes = max_tree_bytes
        self.max_depth = max_depth
        self._tree: Dict[str, Any] = factory_defaults()
        logger.info("ConfigStore initialized", max_tree_bytes=max_tree_bytes)

    @property
    def tree(self) -> Dict[str, Any]:
        """权威配置树（引用）"""
        return self._tree

    def factory_defaults(self) -> Dict[str, Any]:
        """获取出厂默认配置的深拷贝"""
        return factory_defaults()

    def snapshot(self) -> Dict[str, Any]:
        """获取当前配置树的深拷贝"""
        return copy.deepcopy(self._tree)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """序列化当前配置树"""
        return json.dumps(self._tree, ensure_ascii=False, indent=indent)

    def get(self, path: Any) -> Any:
        """读取配置值，不存在返回 None"""
        return self.accessor.get(self._tree, path)

    def set(self, path: Any, value: Any) -> bool:
        """写入配置值"""
        return self.accessor.set(self._tree, path, value)

    def validate_structure(self, candidate: Any) -> bool:
        """验证候选配置的结构

        缺少常见顶级段只警告；序列化大小超过上限则拒绝。

        Args:
            candidate: 候选配置

        Returns:
            结构可接受返回 True
        """
        if not isinstance(candidate, dict):
            logger.security("Config is not a valid mapping", type=type(candidate).__name__)
            return False

        for names in self.WELL_KNOWN_SECTIONS:
            if not any(name in candidate for name in names):
                logger.warning("Missing well-known config section", section=names[0])

        try:
            size = serialized_size(candidate)
            if size > self.max_tree_bytes:
                raise StorageQuotaError("Config size exceeds limit", size=size, limit=self.max_tree_bytes)
        except StorageQuotaError as e:
            logger.security("Config size exceeds limit", size=e.size, limit=e.limit)
            return False
        except (TypeError, ValueError) as e:
            logger.error("Config is not serializable", error=str(e))
            return False

        logger.debug("Config structure validation passed", size=size)
        return True

    def load_tree(self, candidate: Any) -> bool:
        """载入候选配置

        候选配置先经过结构验证和整树净化，再覆盖到出厂默认值之上，
        最后写入现有根对象。任一步骤失败时权威配置树保持不变。

        Args:
            candidate: 候选配置

        Returns:
            载入成功返回 True
        """
        if not self.validate_structure(candidate):
            logger.error("Config load rejected by structure validation")
            return False

        working = copy.deepcopy(candidate)
        if not self.sanitizer.sanitize_tree_in_place(working, self.max_depth):
            logger.error("Config load rejected by security validation")
            return False

        merged = self.accessor.merge(self.factory_defaults(), working, self.max_depth)
        self._replace_contents(merged)
        logger.info("Configuration loaded", sections=len(merged))
        return True

    def reset_subtree(self, section_path: Any) -> bool:
        """将指定子树恢复为出厂默认值，兄弟子树不受影响

        Args:
            section_path: 子树路径，例如 "animations" 或 "searchBar.position"

        Returns:
            重置成功返回 True；路径无效或没有对应默认值时返回 False
        """
        try:
            parsed = parse(section_path)
            check_path(parsed)
        except (MalformedPathError, BlockedPropertyError) as e:
            logger.warning("Invalid section path for reset", section=str(section_path), error=e.message)
            return False

        node: Any = self.factory_defaults()
        for key in parsed:
            if not isinstance(node, dict) or key not in node:
                logger.warning("No factory default for section", section=str(parsed))
                return False
            node = node[key]

        if not self.accessor.set(self._tree, parsed, node):
            return False

        logger.info("Section reset to defaults", section=str(section_path))
        return True

    def reset_all(self) -> None:
        """将整棵配置树恢复为出厂默认值（根对象不变）"""
        self._replace_contents(self.factory_defaults())
        logger.info("Configuration reset to defaults")

    def _replace_contents(self, new_tree: Dict[str, Any]) -> None:
        for key in list(self._tree.keys()):
            if key not in new_tree:
                del self._tree[key]
        for key, value in new_tree.items():
            self._tree[key] = value

    def load_file(self, path: Path) -> Dict[str, Any]:
        """读取配置文件，返回候选配置（不写入权威配置树）

        支持 .json、.yaml/.yml 以及导出的 .js 模块格式。

        Raises:
            ConfigIOError: 文件读取失败
            ConfigParseError: 文件内容无法解析或不是对象
        """
        path = Path(path)
        logger.info("Reading configuration file", path=str(path))

        try:
            content = path.read_text(encoding="utf-8")
        except (IOError, OSError) as e:
            logger.error("Failed to read configuration file", path=str(path), error=str(e))
            raise ConfigIOError(f"Failed to read configuration file: {e}", details=str(e))

        suffix = path.suffix.lower()
        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            elif suffix == ".js":
                data = self._parse_script(content)
            else:
                data = json.loads(content)
        except (yaml.YAMLError, ValueError) as e:
            logger.error("Failed to parse configuration file", path=str(path), error=str(e))
            raise ConfigParseError(f"Failed to parse configuration file: {e}", details=str(e))

        if not isinstance(data, dict):
            raise ConfigParseError("Configuration file must contain an object", details=str(path))
        return data

    def _parse_script(self, content: str) -> Any:
        match = _SCRIPT_ASSIGNMENT.search(content)
        if not match:
            raise ValueError("No searchProConfig assignment found")
        data, _ = json.JSONDecoder().raw_decode(content, match.end())
        return data

    def export_tree(self) -> Dict[str, Any]:
        """生成用于下载的配置副本

        规范化缩略图资源路径，并把 display.showTagsInResults 同步到根级别以兼容旧版搜索组件。

        Raises:
            ConfigValidationError: 配置未通过安全校验
        """
        cfg = self.snapshot()
        if not self.sanitizer.sanitize_tree_in_place(cfg, self.max_depth):
            raise ConfigValidationError("Configuration validation failed")

        thumbnails = cfg.get("thumbnailSettings")
        if isinstance(thumbnails, dict):
            if isinstance(thumbnails.get("defaultImagePath"), str):
                thumbnails["defaultImagePath"] = ensure_asset_prefix(thumbnails["defaultImagePath"])
            images = thumbnails.get("defaultImages")
            if isinstance(images, dict):
                for key, value in images.items():
                    if isinstance(value, str):
                        images[key] = ensure_asset_prefix(value)

        display = cfg.get("display")
        if isinstance(display, dict) and "showTagsInResults" in display:
            cfg["showTagsInResults"] = display["showTagsInResults"]

        return cfg

    def export_script(self) -> str:
        """生成可直接引入页面的 JavaScript 配置模块

        Raises:
            ConfigValidationError: 配置未通过校验或文件过大
        """
        cfg = self.export_tree()
        header = SCRIPT_HEADER.format(generated=datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        body = f"window.searchProConfig = {_dump_json(cfg)};\n"
        content = header + body + SCRIPT_FOOTER

        if len(content.encode("utf-8")) > self.max_tree_bytes:
            raise ConfigValidationError("Configuration file too large")
        return content

    def save_file(self, path: Path) -> None:
        """导出配置到文件，格式由扩展名决定

        Raises:
            ConfigIOError: 文件写入失败
            ConfigValidationError: 配置未通过校验
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".js":
            content = self.export_script()
        elif suffix in (".yaml", ".yml"):
            content = yaml.safe_dump(self.export_tree(), default_flow_style=False,
                                     sort_keys=False, allow_unicode=True)
        else:
            content = _dump_json(self.export_tree())

        logger.info("Saving configuration", path=str(path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except (IOError, OSError) as e:
            logger.error("Failed to write configuration file", path=str(path), error=str(e))
            raise ConfigIOError(f"Failed to write configuration file: {e}", details=str(e))
