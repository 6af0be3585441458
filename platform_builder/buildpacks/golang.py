"""Go buildpack: ``go mod download`` then ``go build``."""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.go_mod import PLATFORM_NAME, GolangDetector
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform

DEFAULT_BINARY_NAME = "app"


class GolangSnippetProperties(BaseModel):
    golang_version: str
    binary_name: str


class GolangPlatform(Platform):
    name = PLATFORM_NAME

    def create_detector(self) -> GolangDetector:
        return GolangDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, PlatformDetectorResult)
        props = GolangSnippetProperties(
            golang_version=result.platform_version, binary_name=DEFAULT_BINARY_NAME
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("golang.sh.j2", props),
            build_properties={
                "GolangVersion": result.platform_version,
                "golangBinaryName": DEFAULT_BINARY_NAME,
            },
        )
