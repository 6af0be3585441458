"""Build plan emission: the machine-readable record of a generated build."""

from __future__ import annotations

import json
from pathlib import Path

from platform_builder.errors import ScriptWriteError
from platform_builder.types import BuildPlanModel
from platform_builder.validator import validate_build_plan

BUILD_PLAN_FILE_NAME = "build-plan.json"


def emit_build_plan(plan: BuildPlanModel) -> str:
    """Serialize *plan* after validating it against the build-plan schema."""
    data = plan.model_dump(mode="json")
    validate_build_plan(data)
    return json.dumps(data, indent=2)


def write_build_plan(path: Path, plan: BuildPlanModel) -> Path:
    payload = emit_build_plan(plan)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError as exc:
        raise ScriptWriteError(str(path), exc.strerror or str(exc)) from exc
    return path


def read_build_plan(path: Path) -> BuildPlanModel:
    return BuildPlanModel.model_validate_json(path.read_text(encoding="utf-8"))
