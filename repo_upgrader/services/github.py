"""
GitHub provider adapter.
"""

import base64
import binascii
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

import httpx

from ..infrastructure.logger import logger
from ..models import Contributor, RemoteRelease
from .base import ProviderAdapter, is_absolute_url


def _decode_content(payload: Any) -> Optional[str]:
    """Decode the base64 ``content`` of a GitHub contents response."""

    if not isinstance(payload, dict) or not payload.get("content"):
        return None
    try:
        return base64.b64decode(payload["content"]).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Could not decode GitHub content: {e}")
        return None


class GitHubAdapter(ProviderAdapter):
    """Releases and metadata from ``api.github.com``."""

    repo_type = "GitHub"

    def _repository_path(self) -> str:
        return (self.local.github_repo or self.local.repo_id or "").strip("/")

    def _build_base_url(self) -> str:
        self.root_url = self.config.github_api_url.rstrip("/")

        # api.github.com serves github.com; Enterprise serves its API under /api/v3
        parsed = urlparse(self.root_url)
        host = parsed.netloc[len("api."):] if parsed.netloc.startswith("api.") else parsed.netloc
        self.project_url = f"{parsed.scheme}://{host}/{self.repo}"
        return f"{self.root_url}/repos/{self.repo}"

    def authorize_request(self, request: httpx.Request) -> None:
        if not self.is_api_request(request.url):
            return

        token = self.access_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

        if self.local.release_asset and "/releases/assets/" in request.url.path:
            request.headers["Accept"] = "application/octet-stream"

    def _fetch_releases(self) -> List[RemoteRelease]:
        payload = self.request(self.get_endpoint("/releases"))
        if not isinstance(payload, list) or not payload:
            return []

        releases = [RemoteRelease.from_github(item) for item in payload if isinstance(item, dict)]

        # Downloads are counted across every release, not only the accepted ones
        self.downloaded = sum(release.download_count for release in releases)
        return releases

    def _accepts(self, release: RemoteRelease) -> bool:
        return release.draft == self.local.draft and release.prerelease == self.local.prerelease

    def _fetch_header_text(self, release: RemoteRelease) -> Optional[str]:
        remote_file = quote(self.local.remote_file or self.local.file)
        url = self.get_endpoint(f"/contents/{remote_file}?ref={quote(release.tag_name, safe='')}")
        return _decode_content(self.request(url))

    def _complete_header(self, comments: Dict[str, str]) -> Dict[str, str]:
        if self.local.github_repo:
            comments.setdefault("github_uri", self.local.github_repo)
        return comments

    def _fetch_readme_text(self, release: RemoteRelease) -> Optional[str]:
        url = self.get_endpoint(f"/readme?ref={quote(release.tag_name, safe='')}")
        return _decode_content(self.request(url))

    def _fetch_contributors(self) -> Dict[str, Contributor]:
        payload = self.request(self.get_endpoint("/contributors"))
        if not isinstance(payload, list):
            return {}

        contributors: Dict[str, Contributor] = {}
        for record in payload:
            if not isinstance(record, dict) or not record.get("login"):
                continue

            user = self.request(f"{self.root_url}/user/{record.get('id')}")
            if isinstance(user, dict):
                # Fields of the contributor record win over the profile
                record = {**user, **record}

            login = record["login"]
            display_name = record.get("name") or login
            if record.get("company"):
                display_name += f" ({record['company']})"

            contributors[login] = Contributor(
                username=login,
                display_name=display_name,
                profile=record.get("html_url"),
                avatar=record.get("avatar_url"),
            )

        return contributors

    def resolve_asset_url(self, release: RemoteRelease) -> Optional[str]:
        asset_name = self.local.release_asset
        if not asset_name:
            return release.source_url

        if is_absolute_url(asset_name):
            return asset_name

        for asset in release.assets:
            if asset.name == asset_name and asset.id is not None:
                return self.get_endpoint(f"/releases/assets/{asset.id}")

        logger.warning(f"Release asset {asset_name} not found in {release.tag_name}")
        return None

    def releases_page_url(self) -> str:
        return f"{self.project_url}/releases"


__all__ = [
    "GitHubAdapter",
]
