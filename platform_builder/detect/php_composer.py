"""PHP detector: composer.json or PHP sources at the root.

Version hint: the ``php`` constraint under ``require`` in composer.json.
Composer separates AND-ed constraints with commas; they are rewritten to the
space-separated form understood by the resolver.
"""

from __future__ import annotations

from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult, read_json_file

PLATFORM_NAME = "php"
COMPOSER_JSON = "composer.json"


class PhpDetectorResult(PlatformDetectorResult):
    has_composer_json: bool = False


class PhpDetector:
    def detect(self, repo: SourceRepo) -> PhpDetectorResult | None:
        has_composer = repo.file_exists(COMPOSER_JSON)
        if not has_composer and not repo.enumerate_files("*.php"):
            return None

        composer = read_json_file(repo, COMPOSER_JSON) or {}
        require = composer.get("require") if isinstance(composer.get("require"), dict) else {}
        constraint = require.get("php", "")
        version = ""
        if isinstance(constraint, str):
            version = " ".join(part.strip() for part in constraint.split(",") if part.strip())

        return PhpDetectorResult(
            platform_name=PLATFORM_NAME,
            platform_version=version,
            has_composer_json=has_composer,
        )
