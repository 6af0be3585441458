"""Ruby buildpack: ``bundle install`` into a vendored bundle path."""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.ruby_gemfile import PLATFORM_NAME, RubyDetector, RubyDetectorResult
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform

BUNDLE_PATH = "vendor/bundle"


class RubySnippetProperties(BaseModel):
    ruby_version: str
    has_gemfile_lock: bool
    bundle_path: str


class RubyPlatform(Platform):
    name = PLATFORM_NAME
    result_type = RubyDetectorResult

    def create_detector(self) -> RubyDetector:
        return RubyDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, RubyDetectorResult)
        props = RubySnippetProperties(
            ruby_version=result.platform_version,
            has_gemfile_lock=result.has_gemfile_lock,
            bundle_path=BUNDLE_PATH,
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("ruby.sh.j2", props),
            build_properties={"RubyVersion": result.platform_version, "rubyBundlePath": BUNDLE_PATH},
        )

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return [BUNDLE_PATH]
