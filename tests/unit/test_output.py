from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from platform_builder.errors import InternalConsistencyError, ScriptWriteError
from platform_builder.package.manifest import (
    format_manifest,
    merge_manifest_properties,
    read_manifest,
    write_manifest,
)
from platform_builder.package.script import (
    BuildScriptProperties,
    PlatformSnippet,
    render_build_script,
    write_script,
)
from platform_builder.planner import emit_build_plan
from platform_builder.rendering import render
from platform_builder.types import BuildPlanModel, PlatformPlanModel
from platform_builder.validator import validate_manifest

# --- Manifest -----------------------------------------------------------------


def test_merge_keeps_platform_order_and_names_platforms() -> None:
    merged = merge_manifest_properties(
        [("python", {"PythonVersion": "3.8.16"}), ("nodejs", {"NodeVersion": "16.20.0"})]
    )
    assert list(merged) == ["PythonVersion", "NodeVersion", "PlatformName"]
    assert merged["PlatformName"] == "python,nodejs"


def test_merge_rejects_key_collisions() -> None:
    with pytest.raises(InternalConsistencyError, match="'Version' written by both 'a' and 'b'"):
        merge_manifest_properties([("a", {"Version": "1"}), ("b", {"Version": "2"})])


def test_merge_rejects_reserved_keys() -> None:
    with pytest.raises(InternalConsistencyError, match="reserved"):
        merge_manifest_properties([("a", {"PlatformName": "x"})])


def test_manifest_file_round_trip(tmp_path: Path) -> None:
    props = {"PythonVersion": "3.8.16", "note": 'say "hi" \\ bye', "PlatformName": "python"}
    path = write_manifest(tmp_path / "out" / "build-manifest.toml", props)
    assert path.read_text(encoding="utf-8").splitlines()[0] == 'PythonVersion="3.8.16"'
    assert read_manifest(path) == props


def test_manifest_values_with_line_breaks_stay_on_one_line(tmp_path: Path) -> None:
    props = {
        "PythonVersion": "3.8.16",
        "note": "first\nsecond\r\nthird",
        "winPath": "C:\\new\\rules",
        "PlatformName": "python",
    }
    validate_manifest(props)
    path = write_manifest(tmp_path / "build-manifest.toml", props)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == len(props)
    assert lines[1] == 'note="first\\nsecond\\r\\nthird"'
    assert read_manifest(path) == props


def test_read_manifest_skips_comments_and_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "m.toml"
    path.write_text('# header\n\nA="1"\nB = "two"\nbroken line\n', encoding="utf-8")
    assert read_manifest(path) == {"A": "1", "B": "two"}


def test_format_manifest_is_deterministic() -> None:
    props = {"b": "2", "a": "1"}
    assert format_manifest(props) == format_manifest(dict(props)) == 'b="2"\na="1"\n'


def test_manifest_schema() -> None:
    validate_manifest({"PlatformName": "python", "PythonVersion": "3.8.16"})
    with pytest.raises(InternalConsistencyError, match="build manifest"):
        validate_manifest({"PlatformName": "python", "bad key": "x"})
    with pytest.raises(InternalConsistencyError):
        validate_manifest({"PythonVersion": "3.8.16"})


# --- Script -------------------------------------------------------------------


def _props(**overrides) -> BuildScriptProperties:
    values = dict(
        source_dir="/src/my app",
        output_dir="/out",
        manifest_file="/out/build-manifest.toml",
        exclude_from_output_dir=["pythonenv3.8"],
        tool_paths=["/opt/python/3.8.16/bin"],
        snippets=[
            PlatformSnippet(name="python", version="3.8.16", text="echo python\n"),
            PlatformSnippet(name="nodejs", version="16.20.0", text="echo node\n"),
        ],
    )
    values.update(overrides)
    return BuildScriptProperties(**values)


def test_build_script_layout() -> None:
    script = render_build_script(_props())
    assert script.startswith("#!/bin/bash\n")
    assert "SOURCE_DIR='/src/my app'" in script
    assert "export PATH=/opt/python/3.8.16/bin:\"$PATH\"" in script
    assert script.index("# ---- python 3.8.16 ----") < script.index("# ---- nodejs 16.20.0 ----")
    assert "--exclude=/pythonenv3.8" in script
    assert "INTERMEDIATE_DIR" not in script


def test_build_script_with_intermediate_dir() -> None:
    script = render_build_script(
        _props(intermediate_dir="/tmp/int", exclude_from_intermediate_dir=["node_modules"])
    )
    assert "INTERMEDIATE_DIR=/tmp/int" in script
    assert "--delete --exclude=/node_modules" in script


def test_rendering_is_deterministic() -> None:
    assert render_build_script(_props()) == render_build_script(_props())


def test_unknown_template_is_internal_error() -> None:
    with pytest.raises(InternalConsistencyError, match="missing.sh.j2"):
        render("missing.sh.j2", _props())


def test_write_script_is_executable(tmp_path: Path) -> None:
    path = write_script(tmp_path / "nested" / "build.sh", "#!/bin/bash\necho hi\n")
    assert path.read_text(encoding="utf-8") == "#!/bin/bash\necho hi\n"
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o755
    assert sorted(p.name for p in path.parent.iterdir()) == ["build.sh"]


def test_write_script_failure_names_the_path(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    target = blocker / "build.sh"
    with pytest.raises(ScriptWriteError) as excinfo:
        write_script(target, "echo\n")
    assert excinfo.value.path == str(target)


# --- Build plan ---------------------------------------------------------------


def test_emit_build_plan() -> None:
    plan = BuildPlanModel(
        source_dir="/src",
        output_dir="/out",
        manifest_file="/out/build-manifest.toml",
        platforms=[PlatformPlanModel(name="python", version="3.8.16", tools={"python": "3.8.16"})],
    )
    data = json.loads(emit_build_plan(plan))
    assert data["schemaVersion"] == "1.0"
    assert data["platforms"][0]["tools"] == {"python": "3.8.16"}


def test_emit_build_plan_rejects_empty_platform_list() -> None:
    plan = BuildPlanModel(source_dir="/src", output_dir="/out", manifest_file="/m", platforms=[])
    with pytest.raises(InternalConsistencyError, match="build plan"):
        emit_build_plan(plan)
