""".NET detector: a *.csproj or *.fsproj at the repo root.

Version hint from ``TargetFramework`` (or the first of ``TargetFrameworks``):
``netcoreapp3.1`` -> ``3.1``, ``net6.0`` -> ``6.0``. ``netstandard`` and
unparsable project files give no hint.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult

logger = get_logger(__name__)

PLATFORM_NAME = "dotnet"
_PROJECT_PATTERNS = ("*.csproj", "*.fsproj")
_TFM = re.compile(r"^net(?:coreapp)?(\d+\.\d+)$")


class DotNetDetectorResult(PlatformDetectorResult):
    project_file: str = ""


def _target_framework(xml_text: str) -> str:
    root = ET.fromstring(xml_text)
    for tag in ("TargetFramework", "TargetFrameworks"):
        for node in root.iter(tag):
            if node.text and node.text.strip():
                return node.text.split(";")[0].strip()
    return ""


class DotNetDetector:
    def detect(self, repo: SourceRepo) -> DotNetDetectorResult | None:
        projects = sorted(p for pattern in _PROJECT_PATTERNS for p in repo.enumerate_files(pattern))
        if not projects:
            return None
        if len(projects) > 1:
            logger.warning("Found %d project files, building %s", len(projects), projects[0])
        project = projects[0]

        version = ""
        try:
            tfm = _target_framework(repo.read_file(project))
        except (OSError, ValueError, ET.ParseError) as exc:
            logger.warning("Could not read target framework from %s: %s", project, exc)
        else:
            match = _TFM.match(tfm.lower())
            if match:
                version = match.group(1)

        return DotNetDetectorResult(
            platform_name=PLATFORM_NAME, platform_version=version, project_file=project
        )
