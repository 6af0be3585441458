"""Typed build options.

`BuildOptions` is validated once, at the CLI boundary, before any detector runs.
The free-form ``-p KEY=VALUE`` property bag is folded into it by
`BuildOptions.from_properties`, which rejects unknown keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from platform_builder.errors import ConfigurationError

DEFAULT_MANIFEST_FILENAME = "build-manifest.toml"
DEFAULT_BUILD_COMMANDS_FILENAME = "build-commands.txt"
DEFAULT_DYNAMIC_INSTALL_ROOT_DIR = Path("/tmp/platform-builder/platforms")
DEFAULT_PREINSTALLED_ROOT_DIR = Path("/opt")
DEFAULT_CONDA_EXECUTABLE_PATH = Path("/opt/conda/condabin/conda")

ZIP_OPTION = "zip"
TAR_GZ_OPTION = "tar-gz"
UNIVERSAL_WHEEL = "universal"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}

PLATFORM_ALIASES = {
    "node": "nodejs",
    "dotnetcore": "dotnet",
    "go": "golang",
    "static-site": "static",
}

# Legacy property names accepted in the -p bag, after normalization.
_PROPERTY_ALIASES = {
    "packagedir": "package_dir",
    "packagewheel": "package_wheel_type",
    "package": "package_command_enabled",
    "manifest_file_name": "manifest_filename",
}


def canonical_platform_name(name: str) -> str:
    key = name.strip().lower()
    return PLATFORM_ALIASES.get(key, key)


def _normalize_key(key: str) -> str:
    return key.strip().lower().replace("-", "_")


def parse_bool(value: Any, option: str = "value") -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Option '{option}' expects true/false but got '{value}'.")


class BuildOptions(BaseModel):
    """Every option recognized by the generator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    platform: str | None = None
    platform_version: str | None = None
    platform_versions: dict[str, str] = Field(default_factory=dict)

    output_dir: Path | None = None
    intermediate_dir: Path | None = None
    manifest_dir: Path | None = None
    manifest_filename: str = DEFAULT_MANIFEST_FILENAME

    package_command_enabled: bool = False
    package_wheel_type: str | None = None
    virtualenv_name: str | None = None
    compress_virtualenv: Literal["zip", "tar-gz"] | None = None
    package_dir: str | None = None
    custom_requirements_txt_path: str | None = None
    enable_collect_static: bool = True
    build_commands_filename: str = DEFAULT_BUILD_COMMANDS_FILENAME
    conda_executable_path: Path = DEFAULT_CONDA_EXECUTABLE_PATH

    dynamic_install_enabled: bool = False
    dynamic_install_root_dir: Path = DEFAULT_DYNAMIC_INSTALL_ROOT_DIR
    preinstalled_root_dir: Path = DEFAULT_PREINSTALLED_ROOT_DIR
    sdk_storage_base_url: str | None = None
    versions_file: Path | None = None

    enable_multi_platform_build: bool = False
    disabled_platforms: list[str] = Field(default_factory=list)

    # The raw -p bag, kept for diagnostics.
    properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("platform")
    @classmethod
    def _lower_platform(cls, v: str | None) -> str | None:
        return canonical_platform_name(v) if v and v.strip() else None

    @field_validator("disabled_platforms")
    @classmethod
    def _lower_disabled(cls, v: list[str]) -> list[str]:
        return [canonical_platform_name(p) for p in v if p.strip()]

    @field_validator("platform_versions")
    @classmethod
    def _lower_versions(cls, v: dict[str, str]) -> dict[str, str]:
        return {
            canonical_platform_name(k): val.strip() for k, val in v.items() if val and val.strip()
        }

    @field_validator("package_wheel_type", "virtualenv_name", "package_dir", "platform_version")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v.strip() if v and v.strip() else None

    @field_validator("custom_requirements_txt_path")
    @classmethod
    def _relative_requirements_path(cls, v: str | None) -> str | None:
        if not v or not v.strip():
            return None
        path = PurePosixPath(v.strip().replace("\\", "/"))
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(
                f"Option 'custom-requirements-txt-path' must be relative to the source "
                f"directory and stay inside it, got '{v}'."
            )
        return path.as_posix()

    @model_validator(mode="after")
    def _platform_version_needs_platform(self) -> BuildOptions:
        if self.platform_version and not self.platform:
            raise ValueError("Option 'platform-version' requires 'platform' to be set.")
        return self

    # --- construction ----------------------------------------------------

    @classmethod
    def create(cls, **values: Any) -> BuildOptions:
        """Build options, reporting validation failures as ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ConfigurationError(f"Invalid build options: {problems}") from exc

    @classmethod
    def from_properties(
        cls, properties: Mapping[str, str] | None = None, **values: Any
    ) -> BuildOptions:
        """Fold a free-form property bag into typed options.

        Explicit keyword *values* (usually CLI flags) win over the bag.
        """
        fields = set(cls.model_fields) - {"properties"}
        merged: dict[str, Any] = {}
        platform_versions: dict[str, str] = {}
        raw = dict(properties or {})

        for key, value in raw.items():
            name = _PROPERTY_ALIASES.get(_normalize_key(key), _normalize_key(key))
            if name in fields:
                merged[name] = _coerce_property(name, value)
            elif name.endswith("_version") and name != "_version":
                platform_versions[name[: -len("_version")]] = value
            else:
                known = ", ".join(sorted(fields))
                raise ConfigurationError(
                    f"Unknown build property '{key}'. Recognized properties: {known}"
                )

        for name, value in values.items():
            if value is not None:
                merged[name] = value
        if platform_versions:
            merged["platform_versions"] = {
                **platform_versions,
                **merged.get("platform_versions", {}),
            }
        merged["properties"] = {str(k): str(v) for k, v in raw.items()}
        return cls.create(**merged)

    # --- accessors -------------------------------------------------------

    def version_for(self, platform_name: str) -> str | None:
        """User-supplied version for *platform_name*, if any."""
        if self.platform == platform_name and self.platform_version:
            return self.platform_version
        return self.platform_versions.get(platform_name)


def _coerce_property(name: str, value: str) -> Any:
    field = BuildOptions.model_fields[name]
    if name == "compress_virtualenv":
        option = (value or "").strip().lower()
        # A bare -p compress_virtualenv means tar-gz.
        if not option:
            return TAR_GZ_OPTION
        if option not in {ZIP_OPTION, TAR_GZ_OPTION}:
            raise ConfigurationError(
                f"Option 'compress_virtualenv' must be '{ZIP_OPTION}' or '{TAR_GZ_OPTION}', "
                f"got '{value}'."
            )
        return option
    if field.annotation is bool:
        return parse_bool(value, name)
    if name == "disabled_platforms":
        return [p for p in value.split(",") if p.strip()]
    return value
