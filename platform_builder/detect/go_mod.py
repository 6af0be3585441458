"""Go detector: go.mod at the root, version from its ``go`` directive."""

from __future__ import annotations

import re

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult

logger = get_logger(__name__)

PLATFORM_NAME = "golang"
GO_MOD = "go.mod"
_GO_DIRECTIVE = re.compile(r"^go\s+(\d+(?:\.\d+){0,2})\s*$")


class GolangDetector:
    def detect(self, repo: SourceRepo) -> PlatformDetectorResult | None:
        if not repo.file_exists(GO_MOD):
            return None
        version = ""
        try:
            for line in repo.read_all_lines(GO_MOD):
                match = _GO_DIRECTIVE.match(line.strip())
                if match:
                    version = match.group(1)
                    break
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s: %s", GO_MOD, exc)
        return PlatformDetectorResult(platform_name=PLATFORM_NAME, platform_version=version)
