"""
Provider registration table.

Maps the repository type declared by a package ("GitHub", "GitLab", or any
type registered by a third party) to the adapter class serving it.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

from ..core.local import LocalDescriptor
from ..infrastructure.logger import logger
from ..models import PackageKind
from .base import ProviderAdapter
from .github import GitHubAdapter
from .gitlab import GitLabAdapter


_PROVIDERS: Dict[str, Type[ProviderAdapter]] = {}


def register_provider(repo_type: str, adapter_class: Type[ProviderAdapter]) -> None:
    _PROVIDERS[repo_type.strip().lower()] = adapter_class


def get_provider(repo_type: Optional[str]) -> Optional[Type[ProviderAdapter]]:
    if not repo_type:
        return None
    return _PROVIDERS.get(repo_type.strip().lower())


def create_adapter(
    kind: Union[PackageKind, str],
    local: Union[LocalDescriptor, str, Path],
    **options: Any,
) -> Optional[ProviderAdapter]:
    """
    Instantiate the adapter for the provider a package declares.

    Args:
        kind: Plugin or theme
        local: Descriptor or path of the package entry file
        **options: Forwarded to the adapter constructor

    Returns:
        The adapter, or None when the provider is missing or unknown
    """
    kind = PackageKind.coerce(kind)
    if not isinstance(local, LocalDescriptor):
        local = LocalDescriptor.from_file(kind, local, options.pop("root", None))

    if not local.has_remote:
        logger.warning(f"No repository found for {local.id}.")
        return None

    adapter_class = get_provider(local.repo_type)
    if adapter_class is None:
        logger.warning(f"Unsupported repository type {local.repo_type!r} for {local.id}")
        return None

    return adapter_class(kind, local, **options)


register_provider(GitHubAdapter.repo_type, GitHubAdapter)
register_provider(GitLabAdapter.repo_type, GitLabAdapter)


__all__ = [
    "register_provider",
    "get_provider",
    "create_adapter",
]
