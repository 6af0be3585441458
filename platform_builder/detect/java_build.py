"""Java detector: Maven (pom.xml) or Gradle (build.gradle / build.gradle.kts).

Version hint from pom.xml properties ``java.version``, ``maven.compiler.release``
or ``maven.compiler.source``. Legacy ``1.x`` spellings map to ``x``.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult

logger = get_logger(__name__)

PLATFORM_NAME = "java"
POM_XML = "pom.xml"
_GRADLE_FILES = ("build.gradle", "build.gradle.kts")
_VERSION_PROPERTIES = ("java.version", "maven.compiler.release", "maven.compiler.source")


class JavaDetectorResult(PlatformDetectorResult):
    uses_maven: bool = False
    uses_maven_wrapper: bool = False
    uses_gradle: bool = False
    uses_gradle_wrapper: bool = False


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def normalize_java_version(value: str) -> str:
    value = value.strip()
    if value.startswith("1.") and value[2:].isdigit():
        return value[2:]
    return value


class JavaDetector:
    def detect(self, repo: SourceRepo) -> JavaDetectorResult | None:
        uses_maven = repo.file_exists(POM_XML)
        uses_gradle = any(repo.file_exists(f) for f in _GRADLE_FILES)
        if not (uses_maven or uses_gradle):
            return None

        return JavaDetectorResult(
            platform_name=PLATFORM_NAME,
            platform_version=self._version_from_pom(repo) if uses_maven else "",
            uses_maven=uses_maven,
            uses_maven_wrapper=repo.file_exists("mvnw"),
            uses_gradle=uses_gradle,
            uses_gradle_wrapper=repo.file_exists("gradlew"),
        )

    @staticmethod
    def _version_from_pom(repo: SourceRepo) -> str:
        try:
            root = ET.fromstring(repo.read_file(POM_XML))
        except (OSError, ValueError, ET.ParseError) as exc:
            logger.warning("Could not parse %s: %s", POM_XML, exc)
            return ""
        props = {}
        for node in root:
            if _local(node.tag) == "properties":
                props = {_local(p.tag): (p.text or "").strip() for p in node}
                break
        for key in _VERSION_PROPERTIES:
            if props.get(key) and "$" not in props[key]:
                return normalize_java_version(props[key])
        return ""
