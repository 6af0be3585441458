"""Static site detector: index.html or index.htm at the root. No SDK, no version."""

from __future__ import annotations

from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult

PLATFORM_NAME = "static"
INDEX_FILES = ("index.html", "index.htm")


class StaticSiteDetectorResult(PlatformDetectorResult):
    index_file: str = ""


class StaticSiteDetector:
    def detect(self, repo: SourceRepo) -> StaticSiteDetectorResult | None:
        for name in INDEX_FILES:
            if repo.file_exists(name):
                return StaticSiteDetectorResult(platform_name=PLATFORM_NAME, index_file=name)
        return None
