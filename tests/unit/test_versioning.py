from __future__ import annotations

import json
from pathlib import Path

import pytest

from platform_builder.errors import ConfigurationError, UnsupportedVersionError
from platform_builder.types import VersionInfo
from platform_builder.versioning import (
    StaticVersionProvider,
    get_max_satisfying_version,
    is_preview_version,
    resolve_version,
)

PYTHON = ["2.7.18", "3.6.15", "3.7.15", "3.8.0b3", "3.8.1", "3.8.16", "3.9.0b1", "3.9.0", "3.10.4"]


@pytest.mark.parametrize(
    "requested, expected",
    [
        ("3.8.1", "3.8.1"),
        ("3.8", "3.8.16"),
        ("3", "3.10.4"),
        ("2", "2.7.18"),
        ("~3.8", "3.8.16"),
        (">=3.7 <3.9", "3.8.16"),
        (">= 3.6", "3.10.4"),
        ("3.9.0b1", "3.9.0b1"),
    ],
)
def test_max_satisfying_version(requested: str, expected: str) -> None:
    assert get_max_satisfying_version(requested, PYTHON) == expected


def test_no_match_and_empty_request_return_empty_string() -> None:
    assert get_max_satisfying_version("4.0", PYTHON) == ""
    assert get_max_satisfying_version("", PYTHON) == ""
    assert get_max_satisfying_version(None, PYTHON) == ""
    assert get_max_satisfying_version("3.8", []) == ""


def test_previews_never_win_semantic_matching() -> None:
    # 3.8.0b3 is a 3.8 entry but only well-formed versions take part.
    assert get_max_satisfying_version("3.8", ["3.8.0b3", "3.8.1"]) == "3.8.1"


def test_preview_fallback_uses_lexical_order() -> None:
    candidates = ["3.9.0b1", "3.9.0b2", "3.9.0b10"]
    assert get_max_satisfying_version("3.9.0b", candidates) == "3.9.0b2"


def test_preview_fallback_when_no_release_matches() -> None:
    dotnet = ["3.1.32", "6.0.16", "7.0.5", "8.0.0-preview.4"]
    assert get_max_satisfying_version("8.0", dotnet) == "8.0.0-preview.4"
    assert get_max_satisfying_version("7.0", dotnet) == "7.0.5"


def test_is_preview_version() -> None:
    assert is_preview_version("3.9.0b1")
    assert is_preview_version("8.0.0-preview.4")
    assert not is_preview_version("3.9.0")


def test_resolve_version_raises_with_supported_list() -> None:
    info = VersionInfo(default_version="3.8.16", supported_versions=["3.8.16", "3.9.0"])
    with pytest.raises(UnsupportedVersionError) as excinfo:
        resolve_version("python", "2.6", info)
    err = excinfo.value
    assert err.platform == "python"
    assert err.version == "2.6"
    assert err.supported_versions == ["3.8.16", "3.9.0"]
    assert str(err) == (
        "Platform 'python' version '2.6' is unsupported. Supported versions: 3.8.16, 3.9.0"
    )


def test_builtin_catalog_has_every_sdk_platform() -> None:
    for name in ("python", "nodejs", "php", "dotnet", "java", "golang", "ruby"):
        info = StaticVersionProvider(name).get_version_info()
        assert info.default_version in info.supported_versions


def test_custom_catalog_file(tmp_path: Path) -> None:
    catalog = tmp_path / "versions.json"
    catalog.write_text(
        json.dumps({"python": {"default_version": "3.11.1", "supported_versions": ["3.11.1"]}}),
        encoding="utf-8",
    )
    info = StaticVersionProvider("python", catalog).get_version_info()
    assert info.default_version == "3.11.1"

    with pytest.raises(ConfigurationError, match="no entry for platform 'ruby'"):
        StaticVersionProvider("ruby", catalog).get_version_info()


def test_unreadable_catalog_is_a_configuration_error(tmp_path: Path) -> None:
    catalog = tmp_path / "broken.json"
    catalog.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Cannot load version catalog"):
        StaticVersionProvider("python", catalog).get_version_info()
