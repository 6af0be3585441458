"""Node.js detector.

Heuristics:
- package.json, or a conventional entry file (server.js, app.js) at the root
- version hint from ``engines.node`` in package.json
- lockfiles decide the package manager used by the generated script

A malformed package.json still marks the repo as Node.js; it only loses the
version hint and script information.
"""

from __future__ import annotations

from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult, read_json_file

PLATFORM_NAME = "nodejs"
PACKAGE_JSON = "package.json"
_CANDIDATE_ENTRIES = ["server.js", "app.js"]


class NodeDetectorResult(PlatformDetectorResult):
    has_package_json: bool = False
    has_yarn_lock: bool = False
    has_package_lock: bool = False
    has_build_script: bool = False


class NodeDetector:
    def detect(self, repo: SourceRepo) -> NodeDetectorResult | None:
        has_package_json = repo.file_exists(PACKAGE_JSON)
        if not has_package_json and not any(repo.file_exists(e) for e in _CANDIDATE_ENTRIES):
            return None

        pkg = read_json_file(repo, PACKAGE_JSON) or {}
        engines = pkg.get("engines") if isinstance(pkg.get("engines"), dict) else {}
        scripts = pkg.get("scripts") if isinstance(pkg.get("scripts"), dict) else {}
        version = engines.get("node", "")

        return NodeDetectorResult(
            platform_name=PLATFORM_NAME,
            platform_version=version.strip() if isinstance(version, str) else "",
            has_package_json=has_package_json,
            has_yarn_lock=repo.file_exists("yarn.lock"),
            has_package_lock=repo.file_exists("package-lock.json"),
            has_build_script="build" in scripts,
        )
