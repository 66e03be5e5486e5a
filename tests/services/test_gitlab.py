import json

import httpx
import pytest

from repo_upgrader.core.filter import HookRegistry
from repo_upgrader.core.local import LocalDescriptor
from repo_upgrader.infrastructure.http_cache import HttpCache
from repo_upgrader.models import PackageKind
from repo_upgrader.services.gitlab import GitLabAdapter


API = "https://gitlab.com/api/v4/projects/group%2Fproject"
BASE = "/api/v4/projects/group%2Fproject"

RELEASE = {
    "tag_name": "v1.1.0",
    "name": "1.1.0",
    "description": "Changes",
    "released_at": "2024-02-01T22:30:00Z",
    "upcoming_release": False,
    "assets": {
        "sources": [
            {"format": "tar.gz", "url": "https://gitlab.com/group/project/-/archive/v1.1.0/project-v1.1.0.tar.gz"},
            {"format": "zip", "url": "https://gitlab.com/group/project/-/archive/v1.1.0/project-v1.1.0.zip"},
        ],
        "links": [],
    },
    "_links": {"self": "https://gitlab.com/group/project/-/releases/v1.1.0"},
}

REMOTE_HEADER = "<?php\n/**\n * Plugin Name: Project\n * Version: 1.1.0\n * GitLab URI: group/project\n */\n"

DEFAULT_ROUTES = {
    f"{BASE}/releases": [RELEASE],
    f"{BASE}/repository/files/project.php/raw": REMOTE_HEADER,
    f"{BASE}/repository/files/README.md/raw": "# Project",
    f"{BASE}/users": [{"username": "sam", "name": "Sam", "web_url": "https://gitlab.com/sam", "avatar_url": None}],
    f"{BASE}/statistics": {"fetches": {"total": 42, "days": []}},
    BASE: {"visibility": "public", "avatar_url": "https://gitlab.com/uploads/avatar.png"},
}


class FakeGitLab:
    """Mock transport keyed by the raw (still percent-encoded) path."""

    def __init__(self, routes=None):
        self.routes = dict(DEFAULT_ROUTES if routes is None else routes)
        self.requests = []

    @staticmethod
    def path_of(request):
        return request.url.raw_path.decode("ascii").split("?")[0]

    def __call__(self, request):
        self.requests.append(request)
        payload = self.routes.get(self.path_of(request))
        if payload is None:
            return httpx.Response(404, json={"message": "404 Not Found"})
        if isinstance(payload, str):
            return httpx.Response(200, text=payload)
        return httpx.Response(200, content=json.dumps(payload).encode("utf-8"))

    def paths(self):
        return [self.path_of(request) for request in self.requests]


def make_adapter(comments=None, server=None, hooks=None):
    """Helper wiring a GitLab adapter to a fake server."""
    values = {"name": "Project", "version": "1.0.0", "gitlab_uri": "group/project"}
    values.update(comments or {})
    local = LocalDescriptor.from_comments(PackageKind.PLUGIN, "project/project.php", values)

    server = server or FakeGitLab()
    client = httpx.Client(transport=httpx.MockTransport(server))
    adapter = GitLabAdapter(
        PackageKind.PLUGIN, local, hooks=hooks or HookRegistry(), http=HttpCache(client=client)
    )
    return adapter, server


# ---- Endpoints -------------------------------------------------------------

def test_project_is_url_encoded():
    adapter, _ = make_adapter()

    assert adapter.base_url == API
    assert adapter.project_url == "https://gitlab.com/group/project"
    assert adapter.releases_page_url() == "https://gitlab.com/group/project/-/releases"


def test_releases_are_paged_by_hundred():
    adapter, server = make_adapter()
    adapter.list_releases()

    assert server.requests[0].url.params["per_page"] == "100"


# ---- Resolution ------------------------------------------------------------

def test_release_is_resolved():
    adapter, _ = make_adapter()

    assert adapter.set_props() is True
    metadata = adapter.metadata

    assert metadata.new_version == "1.1.0"
    assert metadata.package == "https://gitlab.com/group/project/-/archive/v1.1.0/project-v1.1.0.zip"
    assert metadata.url == "https://gitlab.com/group/project/-/releases/v1.1.0"
    assert metadata.last_updated == "2024-02-01 10:30pm GMT"
    assert metadata.release_description == "<p>Changes</p>"
    assert metadata.icons["default"] == "https://gitlab.com/uploads/avatar.png"
    assert metadata.downloaded is None


def test_upcoming_release_is_not_offered():
    """A project whose only release is upcoming, for a stable package."""
    routes = dict(DEFAULT_ROUTES)
    routes[f"{BASE}/releases"] = [dict(RELEASE, upcoming_release=True)]
    adapter, _ = make_adapter(server=FakeGitLab(routes))

    assert adapter.list_releases() == []
    assert adapter.latest_release() is None
    assert adapter.set_props() is False


def test_upcoming_release_for_prerelease_package():
    routes = dict(DEFAULT_ROUTES)
    routes[f"{BASE}/releases"] = [dict(RELEASE, upcoming_release=True)]
    adapter, _ = make_adapter({"pre_release": "1"}, server=FakeGitLab(routes))

    assert [release.tag_name for release in adapter.list_releases()] == ["v1.1.0"]


def test_sections_include_statistics_and_contributors():
    adapter, _ = make_adapter()
    assert adapter.set_props(with_sections=True)
    metadata = adapter.metadata

    assert metadata.downloaded == 42
    assert metadata.sections["description"] == "<h1>Project</h1>"
    assert metadata.contributors["sam"].profile == "https://gitlab.com/sam"
    assert "https://gitlab.com/group/project/-/releases" in metadata.sections["changelog"]


def test_private_project_has_no_icon():
    routes = dict(DEFAULT_ROUTES)
    routes[BASE] = {"visibility": "private", "avatar_url": "https://gitlab.com/uploads/avatar.png"}
    adapter, _ = make_adapter(server=FakeGitLab(routes))

    assert adapter.fetch_default_icon_url() is None


def test_json_remote_file():
    routes = dict(DEFAULT_ROUTES)
    routes[f"{BASE}/repository/files/composer.json/raw"] = {
        "version": "1.1.0",
        "extra": {"wordpress": {"Requires at least": "6.2"}},
    }
    adapter, _ = make_adapter({"remote_file": "composer.json"}, server=FakeGitLab(routes))

    comments = adapter.fetch_header_metadata()
    assert comments["requires_at_least"] == "6.2"
    assert comments["gitlab_uri"] == "group/project"


# ---- Credentials and assets ------------------------------------------------

def test_private_token_header():
    hooks = HookRegistry()
    hooks.add_filter("repo_upgrader/gitlab/access_token", lambda value, *args: "glpat-123")
    adapter, server = make_adapter(hooks=hooks)

    adapter.list_releases()
    assert server.requests[0].headers["PRIVATE-TOKEN"] == "glpat-123"

    outside = httpx.Request("GET", "https://example.com/file.zip")
    adapter.authorize_request(outside)
    assert "PRIVATE-TOKEN" not in outside.headers


def test_project_web_urls_are_authorized():
    hooks = HookRegistry()
    hooks.add_filter("repo_upgrader/gitlab/access_token", lambda value, *args: "glpat-123")
    adapter, _ = make_adapter(hooks=hooks)

    request = httpx.Request("GET", "https://gitlab.com/group/project/-/archive/v1.1.0/project-v1.1.0.zip")
    adapter.authorize_request(request)
    assert request.headers["PRIVATE-TOKEN"] == "glpat-123"


@pytest.mark.parametrize("asset, expected", [
    ("project.zip", f"{API}/v1.1.0/downloads/project.zip"),
    ("https://cdn.example.com/p.zip", "https://cdn.example.com/p.zip"),
])
def test_asset_urls(asset, expected):
    adapter, _ = make_adapter({"release_asset": asset})
    adapter.set_props()
    assert adapter.metadata.package == expected


def test_token_not_sent_to_sibling_project():
    hooks = HookRegistry()
    hooks.add_filter("repo_upgrader/gitlab/group/project/access_token", lambda value, *args: "glpat-123")
    server = FakeGitLab()
    http = HttpCache(client=httpx.Client(transport=httpx.MockTransport(server)))

    def adapter_for(repo):
        local = LocalDescriptor.from_comments(
            PackageKind.PLUGIN, "project/project.php", {"version": "1.0.0", "gitlab_uri": repo}
        )
        return GitLabAdapter(PackageKind.PLUGIN, local, hooks=hooks, http=http)

    adapter_for("group/project")
    sibling = adapter_for("group/project-pro")
    sibling.list_releases()

    assert server.path_of(server.requests[0]) == "/api/v4/projects/group%2Fproject-pro/releases"
    assert "PRIVATE-TOKEN" not in server.requests[0].headers

    web = httpx.Request("GET", "https://gitlab.com/group/project-pro/-/archive/v1/p.zip")
    adapter_for("group/project").authorize_request(web)
    assert "PRIVATE-TOKEN" not in web.headers
