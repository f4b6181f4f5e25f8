"""缩略图资源路径工具"""

import re
from typing import Any

_ASSET_PREFIX = re.compile(r"^\.?/?(?:search-pro-v[34]/)?assets/", re.IGNORECASE)
_ABSOLUTE_URL = re.compile(r"^(https?:)?//", re.IGNORECASE)
_DEFAULT_IMAGE_FIELD = re.compile(r"^thumbnailSettings\.defaultImages\.")
_DEFAULTS_FIELD = re.compile(r"^thumbnails\.defaults\.")


def is_thumbnail_asset_field(field_name: str) -> bool:
    """字段是否为缩略图资源路径字段（兼容新旧两种配置结构）"""
    if field_name == "thumbnailSettings.defaultImagePath" or _DEFAULT_IMAGE_FIELD.match(field_name):
        return True
    return field_name == "thumbnails.defaultPath" or bool(_DEFAULTS_FIELD.match(field_name))


def strip_asset_prefix(value: Any) -> str:
    """去掉 assets/ 前缀，只保留文件名部分"""
    if not value or not isinstance(value, str):
        return ""
    return _ASSET_PREFIX.sub("", value)


def ensure_asset_prefix(value: Any) -> str:
    """为相对文件名补上 assets/ 前缀，绝对 URL 和根路径保持不变"""
    if not value or not isinstance(value, str):
        return ""
    v = value.strip()
    if _ABSOLUTE_URL.match(v) or v.startswith("/"):
        return v
    file_only = strip_asset_prefix(v)
    return f"assets/{file_only}" if file_only else ""
