"""Version resolution against a platform's supported-version catalog.

Requests may be exact (``3.8.1``), partial (``3.8``, ``3``) or npm-style ranges
(``>=14 <17``, ``^8.0``, ``~3.8``). Only well-formed numeric catalog entries
take part in semantic matching. Entries containing letters (``3.9.0b1``,
``8.0.0-preview.4``) are previews: they are matched by string prefix and the
lexically greatest one wins. Lexical order is not release order
(``3.9.0b2`` sorts above ``3.9.0b10``).
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from functools import lru_cache
from importlib import resources
from pathlib import Path

import semantic_version

from platform_builder.errors import ConfigurationError, UnsupportedVersionError
from platform_builder.logging import get_logger
from platform_builder.types import VersionInfo

logger = get_logger(__name__)

_FULL_VERSION = re.compile(r"^\d+\.\d+\.\d+$")
_PARTIAL_VERSION = re.compile(r"^\d+(\.\d+)?$")
_OPERATOR_SPACE = re.compile(r"(>=|<=|>|<|=|~|\^)\s+")


def is_preview_version(version: str) -> bool:
    return any(c.isalpha() for c in version)


def _coerce(version: str) -> semantic_version.Version | None:
    try:
        return semantic_version.Version.coerce(version)
    except ValueError:
        return None


def _satisfies(requested: str, version: semantic_version.Version) -> bool:
    if _FULL_VERSION.match(requested):
        return version == semantic_version.Version(requested)
    if _PARTIAL_VERSION.match(requested):
        parts = [int(p) for p in requested.split(".")]
        if version.major != parts[0]:
            return False
        return len(parts) < 2 or version.minor == parts[1]
    return False


def _max_semver_match(requested: str, candidates: Iterable[str]) -> str:
    parsed = [(v, c) for c in candidates if (v := _coerce(c)) is not None and not v.prerelease]
    if _FULL_VERSION.match(requested) or _PARTIAL_VERSION.match(requested):
        matches = [(v, c) for v, c in parsed if _satisfies(requested, v)]
    else:
        try:
            spec = semantic_version.NpmSpec(_OPERATOR_SPACE.sub(r"\1", requested))
        except ValueError:
            logger.debug("Version request %r is not a valid range", requested)
            return ""
        matches = [(v, c) for v, c in parsed if spec.match(v)]
    if not matches:
        return ""
    return max(matches)[1]


def get_max_satisfying_version(requested: str | None, candidates: Iterable[str]) -> str:
    """Return the best catalog entry for *requested*, or "" when nothing matches.

    An empty request returns "": the caller applies its default-version policy
    before resolving.
    """
    requested = (requested or "").strip()
    if not requested:
        return ""
    candidates = list(candidates)

    well_formed = [c for c in candidates if not is_preview_version(c)]
    match = _max_semver_match(requested, well_formed)
    if match:
        return match

    previews = sorted(
        (c for c in candidates if is_preview_version(c) and c.startswith(requested)),
        reverse=True,
    )
    return previews[0] if previews else ""


def resolve_version(platform: str, requested: str, version_info: VersionInfo) -> str:
    """Resolve *requested* or raise UnsupportedVersionError naming the catalog."""
    resolved = get_max_satisfying_version(requested, version_info.supported_versions)
    if not resolved:
        exc = UnsupportedVersionError(platform, requested, version_info.supported_versions)
        logger.error("Version '%s' is not supported for the %s platform", requested, platform)
        raise exc
    return resolved


# --- Version providers -----------------------------------------------------


@lru_cache(maxsize=8)
def _load_catalog(path: str | None) -> dict[str, VersionInfo]:
    try:
        if path is None:
            text = (
                resources.files("platform_builder.catalog")
                .joinpath("versions.json")
                .read_text(encoding="utf-8")
            )
        else:
            text = Path(path).read_text(encoding="utf-8")
        raw = json.loads(text)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot load version catalog '{path or 'built-in'}': {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Version catalog '{path or 'built-in'}' must be a JSON object")
    return {name.lower(): VersionInfo.model_validate(info) for name, info in raw.items()}


class StaticVersionProvider:
    """Versions for one platform, read from the JSON catalog."""

    def __init__(self, platform_name: str, catalog_path: Path | None = None):
        self.platform_name = platform_name
        self.catalog_path = catalog_path

    def get_version_info(self) -> VersionInfo:
        catalog = _load_catalog(str(self.catalog_path) if self.catalog_path else None)
        info = catalog.get(self.platform_name)
        if info is None:
            raise ConfigurationError(
                f"Version catalog has no entry for platform '{self.platform_name}'."
            )
        return info
