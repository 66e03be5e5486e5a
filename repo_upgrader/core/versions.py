"""
Dotted version comparison helpers.

Versions are compared component by component: numeric parts numerically,
pre-release words by their conventional rank (dev < alpha < beta < RC <
release < pl). A leading "v" is ignored and missing trailing components count
as zero, so "v1.2" and "1.2.0" are the same version.
"""

import re
from itertools import zip_longest
from typing import List, Optional, Tuple


_SPECIAL_RANKS = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "rc": 3,
    "c": 3,
    "#": 4,  # Plain numeric component
    "pl": 5,
    "p": 5,
}
_UNKNOWN_RANK = -1


def normalize_version(version: Optional[str]) -> str:
    """Strip whitespace and a leading "v" from a tag or version string."""

    return (version or "").lstrip("vV \t\n\r\0\x0b").strip()


def _components(version: Optional[str]) -> List[Tuple[int, int]]:
    version = normalize_version(version)
    if not version:
        return []

    # Separate digit runs from letter runs: "1.0rc1" -> 1, 0, rc, 1
    version = re.sub(r"[-_+]", ".", version)
    version = re.sub(r"(?<=\d)(?=[^\d.])|(?<=[^\d.])(?=\d)", ".", version)

    parts: List[Tuple[int, int]] = []
    for chunk in version.split("."):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((_SPECIAL_RANKS["#"], int(chunk)))
        else:
            parts.append((_SPECIAL_RANKS.get(chunk.lower(), _UNKNOWN_RANK), 0))
    return parts


def compare_versions(left: Optional[str], right: Optional[str]) -> int:
    """
    Compare two dotted versions.

    Returns:
        -1 if ``left`` is older, 0 if equal, 1 if ``left`` is newer
    """
    padding = (_SPECIAL_RANKS["#"], 0)
    for a, b in zip_longest(_components(left), _components(right), fillvalue=padding):
        if a != b:
            return -1 if a < b else 1
    return 0


def max_version(left: str, right: str) -> str:
    """The newer of two versions; ``left`` when they are equal."""

    return left if compare_versions(left, right) >= 0 else right


def is_update_available(local_version: Optional[str], new_version: Optional[str]) -> bool:
    """True only when ``new_version`` is strictly newer than ``local_version``."""

    if not normalize_version(new_version):
        return False
    return compare_versions(local_version, new_version) < 0


__all__ = [
    "normalize_version",
    "compare_versions",
    "max_version",
    "is_update_available",
]
