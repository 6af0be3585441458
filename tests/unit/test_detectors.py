from __future__ import annotations

import json

import pytest

from platform_builder.detect.dotnet_project import DotNetDetector
from platform_builder.detect.go_mod import GolangDetector
from platform_builder.detect.java_build import JavaDetector, normalize_java_version
from platform_builder.detect.node_pkg import NodeDetector
from platform_builder.detect.php_composer import PhpDetector
from platform_builder.detect.python_app import PythonDetector
from platform_builder.detect.ruby_gemfile import RubyDetector, translate_gem_constraint
from platform_builder.detect.static_site import StaticSiteDetector
from platform_builder.repo import SourceRepo


def _repo(make_repo, files: dict[str, str]) -> SourceRepo:
    return SourceRepo(make_repo(files))


# --- Python -------------------------------------------------------------------


def test_python_requirements_and_runtime_version(make_repo) -> None:
    repo = _repo(make_repo, {"requirements.txt": "flask\n", "runtime.txt": "python-3.9\n"})
    result = PythonDetector().detect(repo)
    assert result is not None
    assert result.platform_name == "python"
    assert result.platform_version == "3.9"
    assert result.has_requirements_txt
    assert not result.has_conda_environment_yml


def test_python_runtime_without_prefix_gives_no_hint(make_repo) -> None:
    repo = _repo(make_repo, {"runtime.txt": "3.9\n"})
    result = PythonDetector().detect(repo)
    assert result is not None
    assert result.platform_version == ""


def test_python_conda_and_notebooks(make_repo) -> None:
    repo = _repo(make_repo, {"environment.yml": "name: x\n", "analysis.ipynb": "{}"})
    result = PythonDetector().detect(repo)
    assert result is not None
    assert result.conda_environment_file == "environment.yml"
    assert result.has_jupyter_notebook_files


def test_python_custom_requirements_path(make_repo) -> None:
    repo = _repo(make_repo, {"deps/prod.txt": "flask\n"})
    assert PythonDetector().detect(repo) is None
    result = PythonDetector("deps/prod.txt").detect(repo)
    assert result is not None and result.has_requirements_txt


def test_python_not_detected_without_markers(make_repo) -> None:
    assert PythonDetector().detect(_repo(make_repo, {"README.md": "hi"})) is None


# --- Node.js ------------------------------------------------------------------


def test_node_engines_and_lockfiles(make_repo) -> None:
    pkg = {"engines": {"node": ">=14 <17"}, "scripts": {"build": "tsc"}}
    repo = _repo(make_repo, {"package.json": json.dumps(pkg), "yarn.lock": ""})
    result = NodeDetector().detect(repo)
    assert result is not None
    assert result.platform_version == ">=14 <17"
    assert result.has_yarn_lock and result.has_build_script


def test_node_malformed_package_json_still_detects(make_repo) -> None:
    result = NodeDetector().detect(_repo(make_repo, {"package.json": "{oops"}))
    assert result is not None
    assert result.platform_version == ""
    assert result.has_package_json


def test_node_entry_file_without_package_json(make_repo) -> None:
    result = NodeDetector().detect(_repo(make_repo, {"server.js": ""}))
    assert result is not None and not result.has_package_json


# --- PHP ----------------------------------------------------------------------


def test_php_composer_constraint(make_repo) -> None:
    composer = {"require": {"php": ">=7.4,<8.2"}}
    result = PhpDetector().detect(_repo(make_repo, {"composer.json": json.dumps(composer)}))
    assert result is not None
    assert result.platform_version == ">=7.4 <8.2"


def test_php_sources_only(make_repo) -> None:
    result = PhpDetector().detect(_repo(make_repo, {"index.php": "<?php"}))
    assert result is not None and not result.has_composer_json


# --- .NET ---------------------------------------------------------------------

CSPROJ = """<Project Sdk="Microsoft.NET.Sdk.Web">
  <PropertyGroup><TargetFramework>{tfm}</TargetFramework></PropertyGroup>
</Project>
"""


@pytest.mark.parametrize(
    "tfm, version", [("net6.0", "6.0"), ("netcoreapp3.1", "3.1"), ("netstandard2.0", "")]
)
def test_dotnet_target_framework(make_repo, tfm: str, version: str) -> None:
    repo = _repo(make_repo, {"web.csproj": CSPROJ.format(tfm=tfm)})
    result = DotNetDetector().detect(repo)
    assert result is not None
    assert result.platform_version == version
    assert result.project_file == "web.csproj"


def test_dotnet_unparsable_project_still_detects(make_repo) -> None:
    result = DotNetDetector().detect(_repo(make_repo, {"web.fsproj": "<Project"}))
    assert result is not None and result.platform_version == ""


# --- Java ---------------------------------------------------------------------

POM = """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <properties><java.version>1.8</java.version></properties>
</project>
"""


def test_java_maven_version_from_pom(make_repo) -> None:
    result = JavaDetector().detect(_repo(make_repo, {"pom.xml": POM, "mvnw": ""}))
    assert result is not None
    assert result.platform_version == "8"
    assert result.uses_maven and result.uses_maven_wrapper and not result.uses_gradle


def test_java_gradle(make_repo) -> None:
    result = JavaDetector().detect(_repo(make_repo, {"build.gradle.kts": ""}))
    assert result is not None and result.uses_gradle and result.platform_version == ""


def test_normalize_java_version() -> None:
    assert normalize_java_version("1.8") == "8"
    assert normalize_java_version("17") == "17"


# --- Go / Ruby / static -------------------------------------------------------


def test_golang_go_directive(make_repo) -> None:
    go_mod = "module example.com/app\n\ngo 1.19\n\nrequire example.com/x v1.0.0\n"
    result = GolangDetector().detect(_repo(make_repo, {"go.mod": go_mod}))
    assert result is not None and result.platform_version == "1.19"


def test_ruby_gemfile_constraint(make_repo) -> None:
    gemfile = "source 'https://rubygems.org'\nruby '~> 2.7'\ngem 'rails'\n"
    result = RubyDetector().detect(_repo(make_repo, {"Gemfile": gemfile, "Gemfile.lock": ""}))
    assert result is not None
    assert result.platform_version == "^2.7"
    assert result.has_gemfile_lock


def test_ruby_version_file_fallback(make_repo) -> None:
    repo = _repo(make_repo, {"Gemfile": "gem 'sinatra'\n", ".ruby-version": "ruby-3.1.4\n"})
    result = RubyDetector().detect(repo)
    assert result is not None and result.platform_version == "3.1.4"


@pytest.mark.parametrize(
    "constraint, expected",
    [("~> 2.7", "^2.7"), ("~> 2.7.1", "~2.7.1"), ("3.1.4", "3.1.4"), ("= 3.0", "3.0")],
)
def test_translate_gem_constraint(constraint: str, expected: str) -> None:
    assert translate_gem_constraint(constraint) == expected


def test_static_site_index(make_repo) -> None:
    result = StaticSiteDetector().detect(_repo(make_repo, {"index.htm": "<html>"}))
    assert result is not None and result.index_file == "index.htm"
    assert StaticSiteDetector().detect(SourceRepo(make_repo({"a.css": ""}, name="styles"))) is None


# --- Undecodable marker files -------------------------------------------------


@pytest.mark.parametrize(
    "detector, files, version",
    [
        (PythonDetector(), {"runtime.txt": b"python-3.8\xff\n"}, ""),
        (GolangDetector(), {"go.mod": b"module x\n\ngo 1.\xff19\n"}, ""),
        (RubyDetector(), {"Gemfile": b"ruby '\xfe2.7'\n"}, ""),
        (RubyDetector(), {"Gemfile": b"\xfe", ".ruby-version": b"3.1.4\n"}, "3.1.4"),
        (JavaDetector(), {"pom.xml": b"<project>\xff</project>"}, ""),
        (DotNetDetector(), {"web.csproj": b"<Project>\xff</Project>"}, ""),
        (NodeDetector(), {"package.json": b'{"name": "\xff"}'}, ""),
    ],
    ids=["python", "golang", "ruby", "ruby-version-file", "java", "dotnet", "nodejs"],
)
def test_non_utf8_marker_files_still_detect(make_repo, detector, files, version) -> None:
    root = make_repo({})
    for name, data in files.items():
        (root / name).write_bytes(data)
    result = detector.detect(SourceRepo(root))
    assert result is not None
    assert result.platform_version == version


def test_redetection_is_idempotent(make_repo) -> None:
    repo = _repo(
        make_repo,
        {"requirements.txt": "flask\n", "runtime.txt": "python-3.9\n", "notebook.ipynb": "{}"},
    )
    detector = PythonDetector()
    first = detector.detect(repo)
    assert first is not None
    assert detector.detect(repo) == first
    assert PythonDetector().detect(repo) == first
