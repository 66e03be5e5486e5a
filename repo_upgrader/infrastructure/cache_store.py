"""
Key/value stores backing the HTTP cache.

A store keeps ``CachedEntry`` objects with an absolute expiry. Expired
entries are never served; they are dropped when looked up.
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from ..models import CachedEntry, utcnow
from .logger import logger


Clock = Callable[[], datetime]


class CacheStore(ABC):
    """Generic key -> (payload, expiry) store."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or utcnow

    @abstractmethod
    def get(self, key: str) -> Optional[CachedEntry]:
        """Return the unexpired entry for ``key`` or None."""

    @abstractmethod
    def set(self, key: str, payload: Any, ttl: timedelta) -> CachedEntry:
        """Persist ``payload`` under ``key`` for ``ttl``."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``; True if something was removed."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""


class MemoryCacheStore(CacheStore):
    """In-process store, shared by every adapter that receives it."""

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._entries: Dict[str, CachedEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CachedEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self.clock()):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, payload: Any, ttl: timedelta) -> CachedEntry:
        entry = CachedEntry(key=key, payload=payload, expires_at=self.clock() + ttl)
        with self._lock:
            self._entries[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class JsonFileCacheStore(CacheStore):
    """
    Store persisted as a single JSON document.

    Payloads must be JSON serializable, which every decoded API response is.
    A missing or unreadable file behaves like an empty cache.
    """

    def __init__(self, path: Union[str, Path], clock: Optional[Clock] = None):
        super().__init__(clock)
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}
        return raw if isinstance(raw, dict) else {}

    def _save(self, entries: Dict[str, Dict[str, Any]]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(entries), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write cache file {self.path}: {e}")
            return False
        return True

    def get(self, key: str) -> Optional[CachedEntry]:
        with self._lock:
            raw = self._load().get(key)
        if not isinstance(raw, dict) or "expires_at" not in raw:
            return None

        try:
            expires_at = datetime.fromisoformat(raw["expires_at"])
        except (TypeError, ValueError):
            return None

        entry = CachedEntry(key=key, payload=raw.get("payload"), expires_at=expires_at)
        if entry.is_expired(self.clock()):
            self.delete(key)
            return None
        return entry

    def set(self, key: str, payload: Any, ttl: timedelta) -> CachedEntry:
        entry = CachedEntry(key=key, payload=payload, expires_at=self.clock() + ttl)
        with self._lock:
            entries = self._load()
            entries[key] = {"payload": payload, "expires_at": entry.expires_at.isoformat()}
            self._save(entries)
        return entry

    def delete(self, key: str) -> bool:
        with self._lock:
            entries = self._load()
            if entries.pop(key, None) is None:
                return False
            return self._save(entries)

    def clear(self) -> None:
        with self._lock:
            self._save({})


__all__ = [
    "Clock",
    "CacheStore",
    "MemoryCacheStore",
    "JsonFileCacheStore",
]
