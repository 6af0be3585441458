"""Detection contract shared by every platform.

A detector inspects a `SourceRepo` and returns either ``None`` (the platform
does not apply) or a `PlatformDetectorResult` carrying whatever version hint it
found. Detectors never mutate the repo and never look at other detectors'
results; the registry resolves cross-platform conflicts.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from pydantic import BaseModel

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

logger = get_logger(__name__)


class PlatformDetectorResult(BaseModel):
    """Normalized detection result.

    Attributes
    ----------
    platform_name: str
        Registry identifier (e.g. "python", "nodejs").
    platform_version: str
        Requested or detected version; "" means unspecified. Replaced in place
        by the resolved catalog version after version resolution.
    app_directory: str
        Directory (relative to the repo root) the markers were found in.
    """

    platform_name: str
    platform_version: str = ""
    app_directory: str = ""


class Detector(Protocol):
    def detect(self, repo: SourceRepo) -> PlatformDetectorResult | None: ...


def read_json_file(repo: SourceRepo, path: str) -> dict[str, Any] | None:
    """Parse a JSON marker file; malformed or unreadable files count as absent."""
    if not repo.file_exists(path):
        return None
    try:
        data = json.loads(repo.read_file(path))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


def read_first_line(repo: SourceRepo, path: str) -> str:
    if not repo.file_exists(path):
        return ""
    try:
        for line in repo.read_all_lines(path):
            if line.strip():
                return line.strip()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
    return ""
