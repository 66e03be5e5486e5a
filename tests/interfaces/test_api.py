import base64
import json

import httpx
import pytest

from repo_upgrader.core.filter import HookRegistry
from repo_upgrader.infrastructure.http_cache import HttpCache
from repo_upgrader.interfaces.api import API_TOKEN_SECTION, PackageUpgrader, mask_token


BASE = "/repos/acme/widget"

RELEASES = [
    {
        "tag_name": "v2.1.0",
        "name": "Version 2.1.0",
        "body": "Fixes",
        "published_at": "2023-09-19T08:04:00Z",
        "draft": False,
        "prerelease": False,
        "html_url": "https://github.com/acme/widget/releases/tag/v2.1.0",
        "zipball_url": "https://api.github.com/repos/acme/widget/zipball/v2.1.0",
        "assets": [],
    }
]


def header(version="2.0.0", kind_label="Plugin Name", **extra):
    lines = ["/**", f" * {kind_label}: Widget", f" * Version: {version}", " * GitHub URI: acme/widget"]
    lines += [f" * {key}: {value}" for key, value in extra.items()]
    return "<?php\n" + "\n".join(lines + [" */"]) + "\n"


def encoded(text):
    return {"content": base64.b64encode(text.encode("utf-8")).decode("ascii")}


class FakeGitHub:
    """Mock GitHub; endpoints under the repository require ``token`` when set."""

    def __init__(self, token=None):
        self.token = token
        self.requests = []
        self.routes = {
            BASE: {"full_name": "acme/widget", "private": token is not None},
            f"{BASE}/releases": RELEASES,
            f"{BASE}/contents/widget.php": encoded(header("2.1.0")),
            f"{BASE}/contents/style.css": encoded(header("2.1.0", "Theme Name")),
            f"{BASE}/readme": encoded("# Widget"),
            f"{BASE}/contributors": [],
        }

    def __call__(self, request):
        self.requests.append(request)
        if self.token and request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"message": "Bad credentials"})
        payload = self.routes.get(request.url.path)
        if payload is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, content=json.dumps(payload).encode("utf-8"))


def write_package(tmp_path, folder="widget", file="widget.php", content=None):
    path = tmp_path / folder / file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if content is not None else header())
    return path


def make_upgrader(tmp_path, server=None, kind="plugin", **kwargs):
    """Helper creating an upgrader backed by a fake GitHub."""
    server = server or FakeGitHub()
    http = HttpCache(client=httpx.Client(transport=httpx.MockTransport(server)))
    filename = kwargs.pop("filename", None) or write_package(tmp_path)
    upgrader = PackageUpgrader(kind, filename, root=tmp_path, http=http, **kwargs)
    return upgrader, server


# ---- Wiring ----------------------------------------------------------------

def test_bootstrap_resolves_provider(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)

    assert upgrader.local.id == "widget/widget.php"
    assert upgrader.remote is not None
    assert upgrader.remote.repo_type == "GitHub"


def test_package_without_repository(tmp_path, caplog):
    filename = write_package(tmp_path, content="<?php\n/**\n * Plugin Name: Plain\n */\n")

    with caplog.at_level("WARNING"):
        upgrader, _ = make_upgrader(tmp_path, filename=filename)

    assert upgrader.remote is None
    assert "No repository found." in caplog.text

    transient = {"checked": {"widget/widget.php": "1.0"}}
    assert upgrader.check_update(transient) == transient
    assert upgrader.package_information("widget") is None


def test_close_unregisters_filters(tmp_path):
    hooks = HookRegistry()
    upgrader, _ = make_upgrader(tmp_path, hooks=hooks)
    name = "repo_upgrader/github/acme/widget/access_token"

    assert hooks.has_filter(name)
    upgrader.close()
    assert not hooks.has_filter(name)


# ---- Update checks ---------------------------------------------------------

def test_check_update_records_plugin(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)
    transient = {"checked": {"widget/widget.php": "2.0.0"}}

    upgrader.check_update(transient)

    entry = transient["response"]["widget/widget.php"]
    assert entry["new_version"] == "2.1.0"
    assert entry["package"] == "https://api.github.com/repos/acme/widget/zipball/v2.1.0"
    assert entry["plugin"] == "widget/widget.php"


def test_check_update_without_checked_is_untouched(tmp_path):
    upgrader, server = make_upgrader(tmp_path)
    transient = {"response": {}}

    upgrader.check_update(transient)

    assert transient == {"response": {}}
    assert server.requests == []


def test_check_update_follows_local_changes(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)
    transient = {"checked": {"widget/widget.php": "2.0.0"}}
    upgrader.check_update(transient)
    assert "widget/widget.php" in transient["response"]

    write_package(tmp_path, content=header("2.1.0"))
    upgrader.check_update(transient)

    assert upgrader.local.version == "2.1.0"
    assert "widget/widget.php" not in transient["response"]


def test_check_update_records_theme_by_folder(tmp_path):
    filename = write_package(tmp_path, "widget", "style.css", header(kind_label="Theme Name"))
    upgrader, _ = make_upgrader(tmp_path, kind="theme", filename=filename)
    transient = {"checked": {"widget": "2.0.0"}}

    upgrader.check_update(transient)

    assert transient["response"]["widget"]["theme"] == "widget"


# ---- Package information ---------------------------------------------------

def test_package_information_with_sections(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)

    info = upgrader.package_information("widget")

    assert info.new_version == "2.1.0"
    assert info.sections["description"] == "<h1>Widget</h1>"
    assert "See all releases" in info.sections["changelog"]
    assert "api_token" not in info.sections


def test_package_information_other_slug(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)
    assert upgrader.package_information("other") is None


def test_private_package_without_token_gets_stub(tmp_path):
    filename = write_package(tmp_path, content=header(**{"Remote Visibility": "private"}))
    upgrader, _ = make_upgrader(tmp_path, server=FakeGitHub(token="good"), filename=filename)

    info = upgrader.package_information("widget")

    assert info.sections == {"api_token": API_TOKEN_SECTION}
    assert info.version == "2.0.0"
    assert info.new_version is None


def test_private_package_with_token(tmp_path):
    filename = write_package(tmp_path, content=header(**{"Remote Visibility": "private"}))
    upgrader, _ = make_upgrader(
        tmp_path,
        server=FakeGitHub(token="good"),
        filename=filename,
        token_store={"repo_upgrader_plugin_widget_api_token": "good"},
    )

    info = upgrader.package_information("widget")

    assert info.new_version == "2.1.0"
    assert info.sections["api_token"] == API_TOKEN_SECTION


# ---- Credentials -----------------------------------------------------------

def test_api_token_key(tmp_path):
    upgrader, _ = make_upgrader(tmp_path)
    assert upgrader.api_token_key == "repo_upgrader_plugin_widget_api_token"


def test_save_api_token(tmp_path):
    upgrader, server = make_upgrader(tmp_path, server=FakeGitHub(token="good"))

    assert upgrader.save_api_token("") == (False, "API Token is missing.")
    assert upgrader.save_api_token("good") == (True, "API Token successfully saved.")
    assert upgrader.token_store[upgrader.api_token_key] == "good"
    assert upgrader.save_api_token("good") == (True, "API Token is the same.")

    assert upgrader.save_api_token("bad") == (
        False, "API Token is invalid. Verify the API Token and try again."
    )
    assert upgrader.token_store[upgrader.api_token_key] == "good"


def test_invalid_first_token_is_not_kept(tmp_path):
    upgrader, _ = make_upgrader(tmp_path, server=FakeGitHub(token="good"))

    ok, _ = upgrader.save_api_token("bad")

    assert not ok
    assert upgrader.api_token_key not in upgrader.token_store


def test_remove_api_token(tmp_path):
    upgrader, _ = make_upgrader(tmp_path, token_store={"repo_upgrader_plugin_widget_api_token": "tok"})

    assert upgrader.remove_api_token() == (True, "API Token successfully removed.")
    assert upgrader.remove_api_token() == (False, "There was an error. API Token was not removed.")


def test_saved_token_beats_lower_priority_filters(tmp_path):
    hooks = HookRegistry()
    hooks.add_filter("repo_upgrader/access_token", lambda value, *args: "from-config")
    upgrader, _ = make_upgrader(
        tmp_path, hooks=hooks, token_store={"repo_upgrader_plugin_widget_api_token": "saved"}
    )

    assert upgrader.remote.access_token() == "saved"


@pytest.mark.parametrize("token, expected", [
    ("ghp_abcdefgh", "ghp******fgh"),
    ("abc", "abc"),
    ("", ""),
])
def test_mask_token(token, expected):
    assert mask_token(token) == expected


def test_masked_api_token(tmp_path):
    upgrader, _ = make_upgrader(tmp_path, token_store={"repo_upgrader_plugin_widget_api_token": "ghp_abcdefgh"})
    assert upgrader.masked_api_token() == "ghp******fgh"
