"""
Remote provider adapters.
"""

from .base import ProviderAdapter, build_http_cache, format_gmt
from .github import GitHubAdapter
from .gitlab import GitLabAdapter
from .markup import render_markdown
from .registry import create_adapter, get_provider, register_provider

__all__ = [
    "ProviderAdapter",
    "build_http_cache",
    "format_gmt",
    "GitHubAdapter",
    "GitLabAdapter",
    "render_markdown",
    "create_adapter",
    "get_provider",
    "register_provider",
]
