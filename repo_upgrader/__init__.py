"""
repo-upgrader: update checks for packages released on GitHub or GitLab.
"""

from .models import (
    PackageKind,
    RemoteRelease,
    ReleaseAsset,
    Contributor,
    ResolvedMetadata,
    UpgraderConfig,
)
from .core import (
    HookRegistry,
    FilterPipeline,
    LocalDescriptor,
    parse_header_comments,
    is_update_available,
)
from .infrastructure import HttpCache, MemoryCacheStore, JsonFileCacheStore
from .services import GitHubAdapter, GitLabAdapter, ProviderAdapter, create_adapter, register_provider
from .interfaces import PackageUpgrader

__version__ = "1.0.0"

__all__ = [
    "PackageKind",
    "RemoteRelease",
    "ReleaseAsset",
    "Contributor",
    "ResolvedMetadata",
    "UpgraderConfig",
    "HookRegistry",
    "FilterPipeline",
    "LocalDescriptor",
    "parse_header_comments",
    "is_update_available",
    "HttpCache",
    "MemoryCacheStore",
    "JsonFileCacheStore",
    "GitHubAdapter",
    "GitLabAdapter",
    "ProviderAdapter",
    "create_adapter",
    "register_provider",
    "PackageUpgrader",
]
