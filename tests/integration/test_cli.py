from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from platform_builder.cli import app

runner = CliRunner()


@pytest.fixture
def no_conda(tmp_path: Path) -> list[str]:
    return ["-p", f"conda_executable_path={tmp_path / 'no-conda'}"]


@pytest.mark.timeout(20)
def test_detect_json(make_repo, no_conda) -> None:
    src = make_repo({"requirements.txt": "flask\n", "runtime.txt": "python-3.10\n"})
    result = runner.invoke(app, ["detect", str(src), "--json", *no_conda])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data[0]["platform_name"] == "python"
    assert data[0]["platform_version"] == "3.10.11"


@pytest.mark.timeout(20)
def test_detect_table(make_repo) -> None:
    src = make_repo({"go.mod": "module x\n\ngo 1.19\n"})
    result = runner.invoke(app, ["detect", str(src)])
    assert result.exit_code == 0, result.output
    assert "golang" in result.output
    assert "1.19.9" in result.output


@pytest.mark.timeout(20)
def test_ambiguous_repo_is_a_configuration_error(make_repo, no_conda) -> None:
    src = make_repo({"requirements.txt": "", "package.json": "{}"})
    result = runner.invoke(app, ["detect", str(src), *no_conda])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "python" in result.output and "nodejs" in result.output


@pytest.mark.timeout(20)
def test_unknown_property_exit_code(make_repo) -> None:
    src = make_repo({"requirements.txt": ""})
    result = runner.invoke(app, ["build-script", str(src), "-p", "bogus=1"])
    assert result.exit_code == 1
    assert "Unknown build property 'bogus'" in result.output


@pytest.mark.timeout(20)
def test_requirements_path_outside_source_exit_code(make_repo, tmp_path: Path) -> None:
    src = make_repo({"requirements.txt": ""})
    out = tmp_path / "manifest"
    result = runner.invoke(
        app,
        [
            "build-script",
            str(src),
            "--manifest-dir",
            str(out),
            "-p",
            "custom_requirements_txt_path=../secrets.txt",
        ],
    )
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert not out.exists()


@pytest.mark.timeout(20)
def test_build_script_writes_outputs(make_repo, tmp_path: Path, no_conda) -> None:
    src = make_repo({"requirements.txt": "flask\n"})
    out = tmp_path / "out"
    result = runner.invoke(
        app,
        [
            "build-script",
            str(src),
            "-o",
            str(out),
            "--platform",
            "python",
            "--platform-version",
            "3.9",
            "-p",
            "virtualenv_name=env",
            "-p",
            "compress_virtualenv",
            *no_conda,
        ],
    )
    assert result.exit_code == 0, result.output
    assert (out / "build.sh").is_file()
    assert (out / "build-plan.json").is_file()

    shown = runner.invoke(app, ["manifest", str(out / "build-manifest.toml")])
    assert shown.exit_code == 0, shown.output
    manifest = json.loads(shown.stdout)
    assert manifest["PythonVersion"] == "3.9.16"
    assert manifest["virtualEnvName"] == "env"
    assert manifest["compressedVirtualEnvFile"] == "env.tar.gz"


@pytest.mark.timeout(20)
def test_build_script_write_failure_exit_code(make_repo, tmp_path: Path, no_conda) -> None:
    src = make_repo({"requirements.txt": ""})
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    result = runner.invoke(
        app,
        [
            "build-script",
            str(src),
            "-o",
            str(tmp_path / "out"),
            "--script-path",
            str(blocker / "build.sh"),
            *no_conda,
        ],
    )
    assert result.exit_code == 3
    assert "Failed to write" in result.output


@pytest.mark.timeout(20)
def test_unsupported_version_exit_code(make_repo, no_conda) -> None:
    src = make_repo({"requirements.txt": ""})
    result = runner.invoke(
        app,
        ["build-script", str(src), "--platform", "python", "--platform-version", "1.0", *no_conda],
    )
    assert result.exit_code == 1
    assert "version '1.0' is unsupported" in result.output


def test_platforms_lists_catalog() -> None:
    result = runner.invoke(app, ["platforms"])
    assert result.exit_code == 0, result.output
    for name in ("python", "nodejs", "php", "dotnet", "java", "golang", "ruby", "static"):
        assert name in result.output


def test_manifest_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["manifest", str(tmp_path / "missing.toml")])
    assert result.exit_code == 1
    assert "Cannot read manifest" in result.output
