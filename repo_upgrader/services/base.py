"""
Provider adapter abstraction.

An adapter talks to one source-control provider on behalf of one installed
package. It lists the releases matching the package's draft/prerelease
preferences, picks the latest one and assembles the ``ResolvedMetadata`` an
update consumer needs. Remote reads go through the shared ``HttpCache``;
every accessor degrades to a falsy value instead of raising.
"""

import html
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

import httpx

from ..core.filter import FilterPipeline, HookRegistry
from ..core.header_parser import parse_header_comments
from ..core.local import LocalDescriptor
from ..core.versions import max_version
from ..infrastructure.http_cache import HttpCache
from ..infrastructure.logger import logger
from ..models import (
    Contributor, PackageKind, RemoteRelease, ResolvedMetadata, UpgraderConfig
)
from .markup import Renderer, render_markdown


def format_gmt(moment: Optional[datetime]) -> Optional[str]:
    """Format a timestamp like "2023-09-19 8:04am GMT"."""

    if moment is None:
        return None
    moment = moment.astimezone(timezone.utc)
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{moment:%Y-%m-%d} {hour}:{moment:%M}{meridiem} GMT"


def is_absolute_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def is_under(url: Union[str, httpx.URL], base: str) -> bool:
    """True if ``url`` is ``base`` itself or a path or query below it."""

    url = str(url)
    base = base.rstrip("/")
    return url == base or url.startswith((base + "/", base + "?"))


def build_http_cache(config: UpgraderConfig) -> HttpCache:
    """HTTP cache with a client configured from ``config``."""

    client_options: Dict[str, Any] = {
        "headers": {"User-Agent": config.user_agent},
        "follow_redirects": True,
    }
    if config.timeout is not None:
        client_options["timeout"] = config.timeout
    return HttpCache(client=httpx.Client(**client_options), ttl=config.cache_ttl)


####
##      PROVIDER ADAPTER
#####
class ProviderAdapter(ABC):
    """
    Common behaviour of remote release providers.

    Subclasses supply the endpoints and the provider specific response
    shapes; release filtering, version resolution and metadata assembly
    live here.
    """

    repo_type: str = ""

    def __init__(
        self,
        kind: Union[PackageKind, str],
        local: Union[LocalDescriptor, str, Path],
        *,
        hooks: Optional[HookRegistry] = None,
        http: Optional[HttpCache] = None,
        config: Optional[UpgraderConfig] = None,
        renderer: Optional[Renderer] = None,
        root: Optional[Union[str, Path]] = None,
    ):
        self.kind = PackageKind.coerce(kind)
        if isinstance(local, LocalDescriptor):
            self.local = local
        else:
            self.local = LocalDescriptor.from_file(self.kind, local, root)

        self.config = config or UpgraderConfig()
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.http = http if http is not None else build_http_cache(self.config)
        self.renderer: Renderer = renderer or render_markdown
        self.filters = FilterPipeline(
            self.hooks, self.local.repo_type, self.local.repo_id, self.config.hook_prefix
        )

        self.repo = self._repository_path()
        self.base_url = self._build_base_url()
        self.metadata: Optional[ResolvedMetadata] = None

        self._force = False
        self._reset()
        self._install_interceptor()

    # -- Provider specifics -------------------------------------------------

    @abstractmethod
    def _repository_path(self) -> str:
        """The ``owner/name`` path of the repository."""

    @abstractmethod
    def _build_base_url(self) -> str:
        """API base URL of the repository."""

    @abstractmethod
    def _fetch_releases(self) -> List[RemoteRelease]:
        """All releases, newest first, normalized but not yet filtered."""

    @abstractmethod
    def _accepts(self, release: RemoteRelease) -> bool:
        """Whether a release matches the package's draft/prerelease flags."""

    @abstractmethod
    def _fetch_header_text(self, release: RemoteRelease) -> Optional[str]:
        """Raw content of the remote entry file at the release tag."""

    @abstractmethod
    def _fetch_readme_text(self, release: RemoteRelease) -> Optional[str]:
        """Raw Markdown readme at the release tag."""

    @abstractmethod
    def _fetch_contributors(self) -> Dict[str, Contributor]:
        """Contributors keyed by username."""

    @abstractmethod
    def resolve_asset_url(self, release: RemoteRelease) -> Optional[str]:
        """Download URL of the package for ``release``."""

    @abstractmethod
    def releases_page_url(self) -> str:
        """Web page listing every release."""

    @abstractmethod
    def authorize_request(self, request: httpx.Request) -> None:
        """Attach the provider credential to requests for this repository."""

    # -- Plumbing -----------------------------------------------------------

    def _reset(self) -> None:
        self._releases: List[RemoteRelease] = []
        self._releases_fetched = False
        self._comments: Optional[Dict[str, str]] = None
        self._comments_fetched = False
        self._readme: Optional[str] = None
        self._readme_fetched = False
        self._contributors: Dict[str, Contributor] = {}
        self._contributors_fetched = False
        self.downloaded: Optional[int] = None

    def _install_interceptor(self) -> None:
        event_hooks = self.http.client.event_hooks
        event_hooks["request"] = [*event_hooks.get("request", []), self.authorize_request]
        self.http.client.event_hooks = event_hooks

    def close(self) -> None:
        """Detach this adapter's request interceptor from the shared client."""

        event_hooks = self.http.client.event_hooks
        event_hooks["request"] = [
            hook for hook in event_hooks.get("request", []) if hook != self.authorize_request
        ]
        self.http.client.event_hooks = event_hooks

    def get_endpoint(self, uri: str) -> str:
        return self.base_url + uri

    def is_api_request(self, url: Union[str, httpx.URL]) -> bool:
        return is_under(url, self.base_url)

    def request(self, url: str, response_type: str = "json") -> Any:
        return self.http.cached_get(url, response_type, force=self._force)

    def apply_filters(self, hook_key: str, value: Any, *args: Any) -> Any:
        return self.filters.apply(hook_key, value, *args)

    def access_token(self) -> Optional[str]:
        token = self.apply_filters("access_token", False)
        return str(token) if token else None

    def validate_api_token(self) -> bool:
        """True if the repository answers with the current credential."""

        return bool(self.http.cached_get(self.base_url, "json", force=True))

    # -- Capabilities -------------------------------------------------------

    def list_releases(self) -> List[RemoteRelease]:
        """
        Releases matching the package's draft/prerelease flags, newest first.

        Provider ordering is kept as is. Bodies are rendered to HTML.
        """
        if self._releases_fetched:
            return self._releases

        self._releases_fetched = True
        releases = self._fetch_releases()

        accepted = []
        for release in releases:
            if not self._accepts(release):
                continue
            release.body = self.renderer(release.body)
            accepted.append(release)

        if releases and not accepted:
            logger.debug(f"No applicable release among {len(releases)} for {self.local.id}")

        self._releases = accepted
        return self._releases

    def latest_release(self) -> Optional[RemoteRelease]:
        releases = self.list_releases()
        return releases[0] if releases else None

    def fetch_header_metadata(self) -> Optional[Dict[str, str]]:
        """Header metadata of the remote entry file at the latest release."""

        if self._comments_fetched:
            return self._comments

        self._comments_fetched = True
        release = self.latest_release()
        if release is None:
            return None

        content = self._fetch_header_text(release)
        if not content:
            return None

        remote_file = self.local.remote_file or self.local.file
        comments = parse_header_comments(
            content, parse_json=remote_file.endswith(".json"), kind=self.kind
        )
        if comments is None:
            logger.warning(f"No header comment found in remote {remote_file} at {release.tag_name}")
            return None

        self._comments = self._complete_header(comments)
        return self._comments

    def _complete_header(self, comments: Dict[str, str]) -> Dict[str, str]:
        return comments

    def fetch_readme(self) -> Optional[str]:
        """Readme at the latest release, rendered to HTML."""

        if self._readme_fetched:
            return self._readme

        self._readme_fetched = True

        override = self.apply_filters("readme", False)
        if override:
            self._readme = str(override)
            return self._readme

        release = self.latest_release()
        if release is None:
            return None

        text = self._fetch_readme_text(release)
        if not text:
            return None

        self._readme = self.renderer(text)
        return self._readme

    def list_contributors(self) -> Dict[str, Contributor]:
        if self._contributors_fetched:
            return self._contributors

        self._contributors_fetched = True

        override = self.apply_filters("contributors", [])
        if override:
            self._contributors = self._coerce_contributors(override)
            return self._contributors

        self._contributors = self._fetch_contributors()
        return self._contributors

    @staticmethod
    def _coerce_contributors(value: Any) -> Dict[str, Contributor]:
        if isinstance(value, dict):
            items = list(value.values())
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            return {}

        contributors: Dict[str, Contributor] = {}
        for item in items:
            if isinstance(item, dict):
                item = Contributor(
                    username=item.get("username", ""),
                    display_name=item.get("display_name") or item.get("username", ""),
                    profile=item.get("profile"),
                    avatar=item.get("avatar"),
                )
            if isinstance(item, Contributor) and item.username:
                contributors[item.username] = item
        return contributors

    def build_changelog(self) -> str:
        """HTML changelog covering every applicable release."""

        releases = self.list_releases()
        if not releases:
            return (self.metadata.release_description if self.metadata else None) or ""

        tz = self.config.tzinfo
        entries = []
        for release in releases:
            published = release.published_at.astimezone(tz).strftime("%Y-%m-%d") if release.published_at else ""
            tag = html.escape(release.tag_name)
            link = html.escape(release.html_url or "", quote=True)
            entries.append(
                '<div class="changelog-release">\n'
                f"<h2>{tag} ({published})</h2>\n"
                f"<p><strong>{html.escape(release.name)}</strong></p>\n"
                f"<div>{release.body}</div>\n"
                f'<p><a href="{link}" target="_blank">View Release for {tag}</a></p>\n'
                "</div>"
            )

        see_all = html.escape(self.releases_page_url(), quote=True)
        return f"<a href='{see_all}' target='_blank'>See all releases</a><br><br>" + "\n".join(entries)

    def build_release_notes(self) -> Optional[str]:
        release = self.latest_release()
        if release is None:
            return None
        return f"<h1><strong>{html.escape(release.name)}</strong></h1>\n{release.body}"

    def _extra_props(self, metadata: ResolvedMetadata, with_sections: bool) -> None:
        """Provider specific additions to the resolved metadata."""

    # -- Assembly -----------------------------------------------------------

    def set_props(self, with_sections: bool = False, force: bool = False) -> bool:
        """
        Resolve the remote package information.

        Args:
            with_sections: Also fetch readme, contributors and changelog
            force: Drop memoized data and bypass the HTTP cache

        Returns:
            True when ``metadata`` holds fresh information
        """
        if not self.local.has_remote:
            logger.warning(f"No repository configured for {self.local.id}")
            return False

        if force:
            self._reset()
        self._force = force

        try:
            return self._set_props(with_sections)
        finally:
            self._force = False

    def _set_props(self, with_sections: bool) -> bool:
        release = self.latest_release()
        if release is None:
            return False

        remote_comments = self.fetch_header_metadata() or {}
        comments = {**(self.local.comments or {}), **remote_comments}
        remote = LocalDescriptor.from_comments(self.kind, self.local.id, comments)

        metadata = ResolvedMetadata(
            kind=self.kind,
            id=self.local.id,
            slug=self.local.slug,
            folder=self.local.folder,
            file=self.local.remote_file or self.local.file,
            name=remote.name or self.local.name,
            description=remote.description,
            version=remote.version,
            new_version=max_version(self.local.version, release.version),
            tag_name=release.tag_name,
            requires=remote.requires,
            tested=remote.tested,
            requires_php=remote.requires_php,
            url=remote.homepage or release.html_url,
            homepage=remote.homepage,
            package=self.resolve_asset_url(release),
            author_profile=remote.author_uri,
            license_link=remote.license_uri,
            donate_link=remote.donate_uri,
            update_link=remote.update_uri,
            author=remote.author,
            license=remote.license,
            tags=remote.tags,
            requires_plugins=remote.requires_plugins,
            last_updated=format_gmt(release.published_at),
            release_description=release.body,
            remote_visibility=remote.remote_visibility,
        )
        self.metadata = metadata

        if with_sections:
            readme = self.fetch_readme()
            metadata.contributors = self.list_contributors()
            metadata.sections = {
                "description": readme or metadata.release_description,
                "changelog": self.build_changelog(),
                "current_release_notes": self.build_release_notes(),
            }

        self._extra_props(metadata, with_sections)
        if metadata.downloaded is None:
            metadata.downloaded = self.downloaded

        return bool(self.apply_filters("package_information", True, metadata, with_sections))


__all__ = [
    "format_gmt",
    "is_absolute_url",
    "is_under",
    "build_http_cache",
    "ProviderAdapter",
]
