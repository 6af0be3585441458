"""Shared models passed between detection, generation and assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from platform_builder.config import BuildOptions
from platform_builder.repo import SourceRepo


class VersionInfo(BaseModel):
    """Supported-version catalog entry for one platform."""

    default_version: str = ""
    supported_versions: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class BuildScriptGeneratorContext:
    """Per-invocation context, read by every detector and generator."""

    source_repo: SourceRepo
    options: BuildOptions = field(default_factory=BuildOptions)

    @property
    def properties(self) -> dict[str, str]:
        return self.options.properties

    @property
    def output_dir(self) -> Path:
        return self.options.output_dir or Path(self.source_repo.root_path)

    @property
    def intermediate_dir(self) -> Path | None:
        return self.options.intermediate_dir

    @property
    def manifest_dir(self) -> Path:
        return self.options.manifest_dir or self.output_dir

    @property
    def manifest_filename(self) -> str:
        return self.options.manifest_filename


@dataclass
class BuildScriptSnippet:
    bash_build_script_snippet: str
    build_properties: dict[str, str] = field(default_factory=dict)


class PlatformPlanModel(BaseModel):
    name: str
    version: str
    tools: dict[str, str] = Field(default_factory=dict)
    tool_paths: list[str] = Field(default_factory=list)
    exclude_from_intermediate_dir: list[str] = Field(default_factory=list)
    exclude_from_output_dir: list[str] = Field(default_factory=list)
    dynamic_install: bool = False


class BuildPlanModel(BaseModel):
    """Machine-readable record of the decisions behind a generated script."""

    schemaVersion: str = "1.0"
    source_dir: str
    output_dir: str
    intermediate_dir: str | None = None
    manifest_file: str
    script_file: str | None = None
    platforms: list[PlatformPlanModel]
