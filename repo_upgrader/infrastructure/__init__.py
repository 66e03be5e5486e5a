"""
Infrastructure layer: logging, errors and cached HTTP access.
"""

from .logger import logger
from .error_handler import (
    UpgraderError,
    ParseError,
    TransportError,
    AuthRequiredError,
    EmptyResultError,
    NotConfiguredError,
    handle_api_error,
)
from .cache_store import CacheStore, MemoryCacheStore, JsonFileCacheStore
from .http_cache import HttpCache, sanitize_cache_key

__all__ = [
    "logger",
    "UpgraderError",
    "ParseError",
    "TransportError",
    "AuthRequiredError",
    "EmptyResultError",
    "NotConfiguredError",
    "handle_api_error",
    "CacheStore",
    "MemoryCacheStore",
    "JsonFileCacheStore",
    "HttpCache",
    "sanitize_cache_key",
]
