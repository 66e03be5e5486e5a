"""
Resolved metadata model for repo-upgrader.

``ResolvedMetadata`` is the record handed to update-notification consumers:
the local package identity merged with what the remote provider reports.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .package import PackageKind
from .release import Contributor


@dataclass
class ResolvedMetadata:
    """Normalized package information produced by a provider adapter."""

    kind: PackageKind
    id: str
    slug: str
    folder: str
    file: str
    name: str = ""
    description: str = ""

    # Versions
    version: str = "0.0.0"
    new_version: Optional[str] = None
    tag_name: Optional[str] = None
    requires: Optional[str] = None
    tested: Optional[str] = None
    requires_php: Optional[str] = None

    # URLs
    url: Optional[str] = None
    homepage: Optional[str] = None
    package: Optional[str] = None
    author_profile: Optional[str] = None
    license_link: Optional[str] = None
    donate_link: Optional[str] = None
    update_link: Optional[str] = None

    # People and descriptive fields
    author: Optional[str] = None
    license: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    requires_plugins: List[str] = field(default_factory=list)
    contributors: Dict[str, Contributor] = field(default_factory=dict)

    # Release derived
    last_updated: Optional[str] = None  # e.g. "2023-09-19 8:04am GMT"
    release_description: Optional[str] = None
    downloaded: Optional[int] = None
    remote_visibility: str = "public"
    sections: Dict[str, Any] = field(default_factory=dict)
    icons: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def plugin(self) -> Optional[str]:
        return self.id if self.kind is PackageKind.PLUGIN else None

    @property
    def theme(self) -> Optional[str]:
        return self.folder if self.kind is PackageKind.THEME else None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-value representation, suitable for JSON or an update store."""

        data = asdict(self)
        data["kind"] = self.kind.value
        if self.kind is PackageKind.PLUGIN:
            data["plugin"] = self.plugin
        else:
            data["theme"] = self.theme
        return data


__all__ = [
    "ResolvedMetadata",
]
