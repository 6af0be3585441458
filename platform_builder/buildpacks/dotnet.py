""".NET buildpack: restore and publish the detected project into the output dir.

SDK archives unpack with the ``dotnet`` executable at their root, so the
install directory itself goes on PATH.
"""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.dotnet_project import (
    PLATFORM_NAME,
    DotNetDetector,
    DotNetDetectorResult,
)
from platform_builder.errors import NoPlatformDetectedError
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform


class DotNetSnippetProperties(BaseModel):
    dotnet_version: str
    project_file: str
    configuration: str = "Release"


class DotNetCorePlatform(Platform):
    name = PLATFORM_NAME
    result_type = DotNetDetectorResult
    tool_bin_subdir = ""

    def create_detector(self) -> DotNetDetector:
        return DotNetDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, DotNetDetectorResult)
        if not result.project_file:
            # Forced platform without a project file: nothing to publish.
            raise NoPlatformDetectedError(context.source_repo.root_path, PLATFORM_NAME)
        props = DotNetSnippetProperties(
            dotnet_version=result.platform_version, project_file=result.project_file
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("dotnet.sh.j2", props),
            build_properties={
                "DotNetCoreRuntimeVersion": result.platform_version,
                "dotnetProjectFile": result.project_file,
            },
        )

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return ["bin", "obj"]
