"""Static site buildpack. No SDK, so no version, installer or PATH entry.

A static site only builds on its own: when another platform is also detected
the index file is treated as that app's asset.
"""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.static_site import (
    INDEX_FILES,
    PLATFORM_NAME,
    StaticSiteDetector,
    StaticSiteDetectorResult,
)
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform


class StaticSnippetProperties(BaseModel):
    index_file: str


class StaticSitePlatform(Platform):
    name = PLATFORM_NAME
    result_type = StaticSiteDetectorResult
    requires_sdk = False
    supports_multi_platform_build = False

    def create_detector(self) -> StaticSiteDetector:
        return StaticSiteDetector()

    def create_result(self, version: str = "") -> StaticSiteDetectorResult:
        return StaticSiteDetectorResult(platform_name=self.name, index_file=INDEX_FILES[0])

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, StaticSiteDetectorResult)
        return BuildScriptSnippet(
            bash_build_script_snippet=render(
                "static.sh.j2", StaticSnippetProperties(index_file=result.index_file)
            ),
            build_properties={"StaticSiteIndexFile": result.index_file},
        )
