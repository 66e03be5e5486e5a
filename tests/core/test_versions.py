import pytest

from repo_upgrader.core.versions import (
    compare_versions,
    is_update_available,
    max_version,
    normalize_version,
)


@pytest.mark.parametrize("raw, expected", [
    ("v2.1.0", "2.1.0"),
    (" 1.0 ", "1.0"),
    ("V3", "3"),
    (None, ""),
])
def test_normalize_version(raw, expected):
    assert normalize_version(raw) == expected


@pytest.mark.parametrize("left, right, expected", [
    ("1.0.0", "1.0.1", -1),
    ("1.10", "1.9", 1),
    ("1.2", "1.2.0", 0),
    ("v1.2.0", "1.2.0", 0),
    ("1.0rc1", "1.0", -1),
    ("1.0-beta", "1.0-rc1", -1),
    ("1.0.0-dev", "1.0.0-alpha", -1),
    ("1.0pl1", "1.0", 1),
    ("2.0.0", "10.0.0", -1),
])
def test_compare_versions(left, right, expected):
    assert compare_versions(left, right) == expected
    assert compare_versions(right, left) == -expected


def test_max_version_prefers_left_on_tie():
    assert max_version("1.2", "1.2.0") == "1.2"
    assert max_version("2.0.0", "2.1.0") == "2.1.0"
    assert max_version("3.0.0", "2.1.0") == "3.0.0"


@pytest.mark.parametrize("local, remote, expected", [
    ("2.0.0", "2.1.0", True),
    ("1.2.0", "v1.2.0", False),
    ("1.2.0", "1.1.9", False),
    ("1.2.0", "", False),
    ("1.2.0", None, False),
])
def test_is_update_available(local, remote, expected):
    assert is_update_available(local, remote) is expected
