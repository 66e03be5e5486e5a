"""
GitLab provider adapter.
"""

import json
from typing import Dict, List, Optional, Union
from urllib.parse import quote, urlparse

import httpx

from ..models import Contributor, RemoteRelease, ResolvedMetadata
from .base import ProviderAdapter, is_absolute_url, is_under


class GitLabAdapter(ProviderAdapter):
    """
    Releases and metadata from the GitLab REST API.

    The project is addressed by its URL-encoded ``owner/name`` path. GitLab
    has no draft releases, so only ``upcoming_release`` is matched against
    the package's prerelease flag.
    """

    repo_type = "GitLab"

    def _repository_path(self) -> str:
        return (self.local.gitlab_repo or self.local.repo_id or "").strip("/")

    def _build_base_url(self) -> str:
        api_url = self.config.gitlab_api_url.rstrip("/")
        parsed = urlparse(api_url)
        self.root_url = f"{parsed.scheme}://{parsed.netloc}/"
        self.project_url = self.root_url + self.repo
        return f"{api_url}/projects/{quote(self.repo, safe='')}"

    def is_api_request(self, url: Union[str, httpx.URL]) -> bool:
        return is_under(url, self.base_url) or is_under(url, self.project_url)

    def authorize_request(self, request: httpx.Request) -> None:
        if not self.is_api_request(request.url):
            return

        token = self.access_token()
        if token:
            request.headers["PRIVATE-TOKEN"] = token

    def _fetch_releases(self) -> List[RemoteRelease]:
        payload = self.request(self.get_endpoint("/releases?per_page=100"))
        if not isinstance(payload, list) or not payload:
            return []
        return [RemoteRelease.from_gitlab(item) for item in payload if isinstance(item, dict)]

    def _accepts(self, release: RemoteRelease) -> bool:
        return release.prerelease == self.local.prerelease

    def _raw_file_url(self, path: str, release: RemoteRelease) -> str:
        return self.get_endpoint(
            f"/repository/files/{quote(path, safe='')}/raw?ref={quote(release.tag_name, safe='')}"
        )

    def _fetch_header_text(self, release: RemoteRelease) -> Optional[str]:
        remote_file = self.local.remote_file or self.local.file
        is_json = remote_file.endswith(".json")

        content = self.request(self._raw_file_url(remote_file, release), "json" if is_json else "text")
        if content is None or content == "":
            return None
        if not isinstance(content, str):
            content = json.dumps(content)
        return content

    def _complete_header(self, comments: Dict[str, str]) -> Dict[str, str]:
        if self.local.gitlab_repo:
            comments.setdefault("gitlab_uri", self.local.gitlab_repo)
        return comments

    def _fetch_readme_text(self, release: RemoteRelease) -> Optional[str]:
        text = self.request(self._raw_file_url("README.md", release), "md")
        return text if isinstance(text, str) else None

    def _fetch_contributors(self) -> Dict[str, Contributor]:
        payload = self.request(self.get_endpoint("/users"))
        if not isinstance(payload, list):
            return {}

        contributors: Dict[str, Contributor] = {}
        for user in payload:
            if not isinstance(user, dict) or not user.get("username"):
                continue
            username = user["username"]
            contributors[username] = Contributor(
                username=username,
                display_name=user.get("name") or username,
                profile=user.get("web_url"),
                avatar=user.get("avatar_url"),
            )
        return contributors

    def fetch_downloads(self) -> Optional[int]:
        """Total fetch count from the project statistics."""

        if self.downloaded is not None:
            return self.downloaded

        statistics = self.request(self.get_endpoint("/statistics"))
        if not isinstance(statistics, dict):
            return None

        total = (statistics.get("fetches") or {}).get("total")
        self.downloaded = int(total) if total is not None else None
        return self.downloaded

    def fetch_default_icon_url(self) -> Optional[str]:
        """Project avatar, only exposed for public projects."""

        project = self.request(self.base_url)
        if not isinstance(project, dict):
            return None
        if project.get("visibility") != "public" or not project.get("avatar_url"):
            return None
        return project["avatar_url"]

    def _extra_props(self, metadata: ResolvedMetadata, with_sections: bool) -> None:
        metadata.icons["default"] = self.fetch_default_icon_url()
        if with_sections:
            metadata.downloaded = self.fetch_downloads()

    def resolve_asset_url(self, release: RemoteRelease) -> Optional[str]:
        asset_name = self.local.release_asset
        if not asset_name:
            return release.source_url

        if is_absolute_url(asset_name):
            return asset_name

        return self.get_endpoint(f"/{quote(release.tag_name, safe='')}/downloads/{quote(asset_name)}")

    def releases_page_url(self) -> str:
        return f"{self.project_url}/-/releases"


__all__ = [
    "GitLabAdapter",
]
