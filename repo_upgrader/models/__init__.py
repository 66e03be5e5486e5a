"""
Core data models API surface for repo-upgrader.

This file re-exports model classes from domain-specific modules so callers
can write `from repo_upgrader.models import X`.
"""

from .package import PackageKind
from .release import (
    parse_timestamp,
    ReleaseAsset,
    RemoteRelease,
    Contributor,
)
from .metadata import ResolvedMetadata
from .cache import CachedEntry, utcnow
from .config import DEFAULT_CACHE_TTL, UpgraderConfig

__all__ = [
    # Package models
    "PackageKind",
    # Release models
    "parse_timestamp",
    "ReleaseAsset",
    "RemoteRelease",
    "Contributor",
    # Metadata models
    "ResolvedMetadata",
    # Cache models
    "CachedEntry",
    "utcnow",
    # Config models
    "DEFAULT_CACHE_TTL",
    "UpgraderConfig",
]
