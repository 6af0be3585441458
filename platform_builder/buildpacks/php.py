"""PHP buildpack: ``composer install`` when composer.json is present."""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.php_composer import PLATFORM_NAME, PhpDetector, PhpDetectorResult
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform


class PhpSnippetProperties(BaseModel):
    php_version: str
    has_composer_json: bool


class PhpPlatform(Platform):
    name = PLATFORM_NAME
    result_type = PhpDetectorResult

    def create_detector(self) -> PhpDetector:
        return PhpDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, PhpDetectorResult)
        props = PhpSnippetProperties(
            php_version=result.platform_version, has_composer_json=result.has_composer_json
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("php.sh.j2", props),
            build_properties={"PhpVersion": result.platform_version},
        )

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return ["vendor"]
