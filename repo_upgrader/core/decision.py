"""
Update decision and transfer object assembly.
"""

import re
from typing import Any, Dict, MutableMapping, Optional

from ..infrastructure.logger import logger
from ..models import ResolvedMetadata
from .versions import is_update_available


_UNSAFE_CHARACTERS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ud800-\udfff]")


def sanitize_text(value: str) -> str:
    """Remove characters an update store cannot persist."""

    return _UNSAFE_CHARACTERS.sub("", value)


def _sanitize(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, dict):
        return {key: _sanitize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_sanitize(item) for item in value]
    return value


def build_update_offer(metadata: ResolvedMetadata) -> Dict[str, Any]:
    """Plain, storage-safe representation of resolved metadata."""

    return _sanitize(metadata.to_dict())


def apply_update(
    transient: MutableMapping[str, Any],
    key: str,
    local_version: Optional[str],
    metadata: Optional[ResolvedMetadata],
) -> bool:
    """
    Record or clear the update entry for ``key`` in an update store.

    Args:
        transient: Host update store with a "response" mapping
        key: Package key in the store (plugin id or theme folder)
        local_version: Installed version
        metadata: Resolved remote metadata, None when unavailable

    Returns:
        True if an update entry was recorded
    """
    response = transient.setdefault("response", {})
    new_version = metadata.new_version if metadata is not None else None

    if metadata is not None and is_update_available(local_version, new_version):
        logger.info(f"Update available for {key}: {local_version} -> {new_version}")
        response[key] = build_update_offer(metadata)
        return True

    response.pop(key, None)
    return False


__all__ = [
    "sanitize_text",
    "build_update_offer",
    "apply_update",
]
