"""Schema validation of the build manifest and build plan."""

from __future__ import annotations

import json
from importlib import resources

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from platform_builder.errors import InternalConsistencyError

# --- Schema loaders ---------------------------------------------------------


def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _build_plan_schema() -> dict:
    return _load_schema("platform_builder.schema", "build-plan.schema.json")


def _manifest_schema() -> dict:
    return _load_schema("platform_builder.schema", "manifest.schema.json")


# --- Public validators ------------------------------------------------------


def _validate(schema: dict, data: dict, what: str) -> None:
    try:
        Draft202012Validator(schema).validate(data)
    except ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise InternalConsistencyError(f"Generated {what} is invalid at {path}: {exc.message}") from exc


def validate_build_plan(data: dict) -> None:
    _validate(_build_plan_schema(), data, "build plan")


def validate_manifest(data: dict) -> None:
    _validate(_manifest_schema(), data, "build manifest")
