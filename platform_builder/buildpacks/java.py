"""Java buildpack: Maven or Gradle package build, wrapper scripts preferred."""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.java_build import PLATFORM_NAME, JavaDetector, JavaDetectorResult
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform


class JavaSnippetProperties(BaseModel):
    java_version: str
    build_tool: str
    use_wrapper: bool


class JavaPlatform(Platform):
    name = PLATFORM_NAME
    result_type = JavaDetectorResult

    def create_detector(self) -> JavaDetector:
        return JavaDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, JavaDetectorResult)
        # Maven wins when both build files are present.
        build_tool = "gradle" if result.uses_gradle and not result.uses_maven else "maven"
        use_wrapper = result.uses_maven_wrapper if build_tool == "maven" else result.uses_gradle_wrapper
        props = JavaSnippetProperties(
            java_version=result.platform_version, build_tool=build_tool, use_wrapper=use_wrapper
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("java.sh.j2", props),
            build_properties={"JavaVersion": result.platform_version, "javaBuildTool": build_tool},
        )

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return ["target", "build", ".gradle"]
