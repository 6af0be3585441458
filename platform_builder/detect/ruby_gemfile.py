"""Ruby detector: Gemfile at the root.

Version hint from a ``ruby '<constraint>'`` line in the Gemfile, falling back
to .ruby-version. The pessimistic operator ``~>`` is translated to the npm
range with the same meaning: ``~> 2.7`` -> ``^2.7``, ``~> 2.7.1`` -> ``~2.7.1``.
"""

from __future__ import annotations

import re

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult, read_first_line

logger = get_logger(__name__)

PLATFORM_NAME = "ruby"
GEMFILE = "Gemfile"
RUBY_VERSION_FILE = ".ruby-version"
_RUBY_LINE = re.compile(r"""^\s*ruby\s+['"]([^'"]+)['"]""")


class RubyDetectorResult(PlatformDetectorResult):
    has_gemfile_lock: bool = False


def translate_gem_constraint(constraint: str) -> str:
    constraint = constraint.strip()
    if not constraint.startswith("~>"):
        return constraint.removeprefix("=").strip()
    version = constraint[2:].strip()
    return f"^{version}" if version.count(".") < 2 else f"~{version}"


class RubyDetector:
    def detect(self, repo: SourceRepo) -> RubyDetectorResult | None:
        if not repo.file_exists(GEMFILE):
            return None
        version = ""
        try:
            for line in repo.read_all_lines(GEMFILE):
                match = _RUBY_LINE.match(line)
                if match:
                    version = translate_gem_constraint(match.group(1))
                    break
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s: %s", GEMFILE, exc)
        if not version:
            version = read_first_line(repo, RUBY_VERSION_FILE).removeprefix("ruby-")

        return RubyDetectorResult(
            platform_name=PLATFORM_NAME,
            platform_version=version,
            has_gemfile_lock=repo.file_exists("Gemfile.lock"),
        )
