"""
Cache models for repo-upgrader.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CachedEntry:
    """A memoized remote response and the moment it stops being served."""

    key: str
    payload: Any
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at


__all__ = [
    "utcnow",
    "CachedEntry",
]
