"""
Configuration models for repo-upgrader.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_CACHE_TTL = timedelta(hours=12)


@dataclass
class UpgraderConfig:
    """
    Unified configuration for remote release resolution.

    The defaults talk to the public GitHub and GitLab APIs and keep remote
    responses for twelve hours.
    """

    # Caching
    cache_ttl: timedelta = DEFAULT_CACHE_TTL

    # Extension hooks are named "{hook_prefix}/..."
    hook_prefix: str = "repo_upgrader"

    # Provider endpoints
    github_api_url: str = "https://api.github.com"
    gitlab_api_url: str = "https://gitlab.com/api/v4"

    # Presentation
    timezone: str = "UTC"  # Used for changelog dates

    # Transport settings; None keeps the httpx default
    timeout: Optional[float] = None
    user_agent: str = "repo-upgrader"

    verbose: bool = False

    def __post_init__(self) -> None:
        if self.cache_ttl < timedelta(0):
            raise ValueError("cache_ttl cannot be negative")
        if not self.hook_prefix:
            raise ValueError("hook_prefix is required")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


__all__ = [
    "DEFAULT_CACHE_TTL",
    "UpgraderConfig",
]
