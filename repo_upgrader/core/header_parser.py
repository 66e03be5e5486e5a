"""
Header comment parsing for installed packages.

Packages declare their metadata in the first block comment of their entry
file (``Plugin Name: ...``, ``Version: ...``). Composer style manifests are
supported by synthesizing an equivalent comment block first.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..infrastructure.logger import logger
from ..models import PackageKind


HeaderContent = Union[str, Path, Sequence[str]]

_BLOCK_COMMENT = re.compile(r"/\*+(.*?)\*/", re.DOTALL)
_KEY_SEPARATORS = re.compile(r"[\s-]+")
_KEY_DECORATION = "/* \t\n\r\0\x0b"


def _manifest_field(data: Any, *path: Any) -> Any:
    for part in path:
        if isinstance(data, Mapping):
            data = data.get(part)
        elif isinstance(data, list) and isinstance(part, int):
            data = data[part] if len(data) > part else None
        else:
            return None
    return data


def _header_value(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value).strip()


def mock_header_comments_from_manifest(
    manifest: Union[str, Mapping[str, Any]],
    kind: Union[PackageKind, str] = PackageKind.PLUGIN,
) -> Optional[str]:
    """
    Build a header comment block from a ``composer.json`` style manifest.

    Keys of ``extra.wordpress`` override the matching manifest fields and
    every one of them is passed through verbatim, so any custom header can be
    declared there.

    Args:
        manifest: Manifest JSON text or decoded mapping
        kind: Package kind, used for the "{Kind} Name" / "{Kind} URI" keys

    Returns:
        Comment block text, or None if the manifest is not valid JSON
    """
    if isinstance(manifest, str):
        try:
            manifest = json.loads(manifest)
        except ValueError as e:
            logger.warning(f"Invalid package manifest: {e}")
            return None

    if not isinstance(manifest, Mapping):
        return None

    label = PackageKind.coerce(kind).value
    extra = _manifest_field(manifest, "extra", "wordpress")
    extra = extra if isinstance(extra, Mapping) else {}

    def pick(header: str, *path: Any) -> Any:
        if header in extra:
            return extra[header]
        return _manifest_field(manifest, *path) if path else None

    headers: Dict[str, Any] = {
        f"{label} Name": pick(f"{label} Name", "name"),
        f"{label} URI": pick(f"{label} URI", "homepage"),
        "Version": pick("Version", "version"),
        "Description": pick("Description", "description"),
        "Author": pick("Author", "authors", 0, "name"),
        "Author URI": pick("Author URI", "authors", 0, "homepage"),
        "Requires at least": pick("Requires at least"),
        "Requires PHP": pick("Requires PHP", "require", "php"),
        "License": pick("License", "license"),
        "License URI": pick("License URI"),
    }
    headers.update(extra)

    lines = ["<?php", "", "/**"]
    for key, value in headers.items():
        text = _header_value(value)
        if text:
            lines.append(f" * {key}: {text}")
    lines.append(" */")

    return "\n".join(lines) + "\n"


def _read_content(content: HeaderContent, parse_json: bool) -> "tuple[Optional[str], bool]":
    if isinstance(content, Path):
        if not content.is_file():
            return None, parse_json
        return content.read_text(encoding="utf-8", errors="replace"), parse_json or content.suffix == ".json"

    if isinstance(content, str):
        if content and "\n" not in content and len(content) < 4096:
            try:
                path = Path(content)
                if path.is_file():
                    return _read_content(path, parse_json)
            except (OSError, ValueError):
                pass
        return content, parse_json

    if isinstance(content, Sequence) and all(isinstance(line, str) for line in content):
        return "\n".join(content), parse_json

    return None, parse_json


def parse_header_comments(
    content: HeaderContent,
    parse_json: bool = False,
    kind: Union[PackageKind, str] = PackageKind.PLUGIN,
) -> Optional[Dict[str, str]]:
    """
    Parse header metadata from source text, a file path or a list of lines.

    Keys are case-folded with spaces and hyphens turned into underscores.
    When a key appears more than once in the block the last occurrence wins.

    Args:
        content: Raw source, a path to a file, or a sequence of lines
        parse_json: Treat the content as a JSON manifest (implied by a .json path)
        kind: Package kind used when synthesizing headers from a manifest

    Returns:
        Mapping of normalized keys to values, or None when no comment block exists
    """
    text, parse_json = _read_content(content, parse_json)
    if text is None:
        logger.debug("Unsupported header content")
        return None

    if parse_json:
        text = mock_header_comments_from_manifest(text, kind)

    if not text:
        return None

    match = _BLOCK_COMMENT.search(text)
    if match is None:
        return None

    details: Dict[str, str] = {}
    for line in match.group(1).splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = _KEY_SEPARATORS.sub("_", key.strip(_KEY_DECORATION).lower())
        if not key:
            continue
        details[key] = value.strip()

    if "name" not in details:
        for alias in ("plugin_name", "theme_name"):
            if alias in details:
                details["name"] = details[alias]
                break

    if "uri" not in details:
        for alias in ("plugin_uri", "theme_uri"):
            if alias in details:
                details["uri"] = details[alias]
                break

    return details


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma separated header value."""

    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_flag(value: Optional[str]) -> bool:
    """Interpret a header value as a boolean flag."""

    if value is None:
        return False
    return value.strip().lower() in ("1", "true", "yes", "on")


__all__ = [
    "HeaderContent",
    "mock_header_comments_from_manifest",
    "parse_header_comments",
    "split_list",
    "parse_flag",
]
