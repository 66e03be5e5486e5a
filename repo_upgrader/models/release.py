"""
Release domain models for repo-upgrader.

Providers answer with differently shaped release documents. The classes in
this module are the provider-neutral form every adapter normalizes to before
the rest of the engine looks at a release.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 API timestamp into an aware UTC datetime."""

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class ReleaseAsset:
    """A named downloadable file attached to a release."""

    name: str
    id: Optional[int] = None
    url: Optional[str] = None
    download_count: int = 0


@dataclass
class RemoteRelease:
    """Provider-normalized release information."""

    tag_name: str
    name: str = ""
    body: str = ""
    published_at: Optional[datetime] = None
    draft: bool = False
    prerelease: bool = False
    assets: List[ReleaseAsset] = field(default_factory=list)
    source_url: Optional[str] = None  # Auto-generated zip archive of the tag
    html_url: Optional[str] = None

    @property
    def version(self) -> str:
        """Tag name without the leading "v" and surrounding whitespace."""

        return self.tag_name.lstrip("v \t\n\r\0\x0b").strip()

    @property
    def download_count(self) -> int:
        return sum(asset.download_count for asset in self.assets)

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> "RemoteRelease":
        """Build a release from a GitHub ``/releases`` item."""

        assets = [
            ReleaseAsset(
                name=asset.get("name") or "",
                id=asset.get("id"),
                url=asset.get("browser_download_url") or asset.get("url"),
                download_count=int(asset.get("download_count") or 0),
            )
            for asset in data.get("assets") or []
            if isinstance(asset, dict)
        ]

        return cls(
            tag_name=data.get("tag_name") or "",
            name=data.get("name") or data.get("tag_name") or "",
            body=data.get("body") or "",
            published_at=parse_timestamp(data.get("published_at") or data.get("created_at")),
            draft=bool(data.get("draft")),
            prerelease=bool(data.get("prerelease")),
            assets=assets,
            source_url=data.get("zipball_url"),
            html_url=data.get("html_url"),
        )

    @classmethod
    def from_gitlab(cls, data: Dict[str, Any]) -> "RemoteRelease":
        """
        Build a release from a GitLab ``/releases`` item.

        GitLab has no draft releases; ``upcoming_release`` plays the role of
        the prerelease flag. Only the zip flavoured source archive is kept.
        """

        raw_assets = data.get("assets") or {}
        links = raw_assets.get("links") or [] if isinstance(raw_assets, dict) else []
        sources = raw_assets.get("sources") or [] if isinstance(raw_assets, dict) else []

        assets = [
            ReleaseAsset(
                name=link.get("name") or "",
                id=link.get("id"),
                url=link.get("direct_asset_url") or link.get("url"),
            )
            for link in links
            if isinstance(link, dict)
        ]

        source_url = None
        for source in sources:
            if isinstance(source, dict) and source.get("format") == "zip":
                source_url = source.get("url")
                break

        links_section = data.get("_links") or {}

        return cls(
            tag_name=data.get("tag_name") or "",
            name=data.get("name") or data.get("tag_name") or "",
            body=data.get("description") or "",
            published_at=parse_timestamp(data.get("released_at") or data.get("created_at")),
            draft=False,
            prerelease=bool(data.get("upcoming_release")),
            assets=assets,
            source_url=source_url,
            html_url=links_section.get("self") if isinstance(links_section, dict) else None,
        )


@dataclass
class Contributor:
    """A person credited on the remote repository."""

    username: str
    display_name: str
    profile: Optional[str] = None
    avatar: Optional[str] = None


__all__ = [
    "parse_timestamp",
    "ReleaseAsset",
    "RemoteRelease",
    "Contributor",
]
