"""
Core engine: header parsing, local descriptors, filters and update decisions.
"""

from .header_parser import (
    mock_header_comments_from_manifest,
    parse_header_comments,
)
from .local import LocalDescriptor, package_id_for, split_package_id
from .filter import FilterPipeline, HookRegistry
from .versions import compare_versions, is_update_available, max_version, normalize_version
from .decision import apply_update, build_update_offer, sanitize_text

__all__ = [
    "mock_header_comments_from_manifest",
    "parse_header_comments",
    "LocalDescriptor",
    "package_id_for",
    "split_package_id",
    "FilterPipeline",
    "HookRegistry",
    "compare_versions",
    "is_update_available",
    "max_version",
    "normalize_version",
    "apply_update",
    "build_update_offer",
    "sanitize_text",
]
