"""Platform registry and detection orchestrator.

Platforms are declared in a fixed order; that order (with a user-forced
platform first) decides the order of snippets in the generated script.
Detectors only read the repo, so they run concurrently; results are ordered
before any decision is made.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from platform_builder.buildpacks.base import Platform
from platform_builder.buildpacks.dotnet import DotNetCorePlatform
from platform_builder.buildpacks.golang import GolangPlatform
from platform_builder.buildpacks.java import JavaPlatform
from platform_builder.buildpacks.node import NodePlatform
from platform_builder.buildpacks.php import PhpPlatform
from platform_builder.buildpacks.python import PythonPlatform
from platform_builder.buildpacks.ruby import RubyPlatform
from platform_builder.buildpacks.static import StaticSitePlatform
from platform_builder.config import BuildOptions, canonical_platform_name
from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.errors import (
    AmbiguousPlatformError,
    ConfigurationError,
    NoPlatformDetectedError,
    UnsupportedPlatformError,
)
from platform_builder.logging import get_logger
from platform_builder.types import BuildScriptGeneratorContext

logger = get_logger(__name__)

PLATFORM_TYPES: tuple[type[Platform], ...] = (
    PythonPlatform,
    NodePlatform,
    PhpPlatform,
    DotNetCorePlatform,
    JavaPlatform,
    GolangPlatform,
    RubyPlatform,
    StaticSitePlatform,
)


@dataclass
class DetectedPlatform:
    platform: Platform
    result: PlatformDetectorResult

    @property
    def name(self) -> str:
        return self.platform.name


class PlatformRegistry:
    def __init__(self, platforms: Iterable[Platform]):
        self._platforms = list(platforms)
        self._by_name = {p.name: p for p in self._platforms}

    @classmethod
    def create(cls, options: BuildOptions) -> PlatformRegistry:
        return cls(platform_type(options) for platform_type in PLATFORM_TYPES)

    def __iter__(self):
        return iter(self._platforms)

    def names(self) -> list[str]:
        return [p.name for p in self._platforms]

    def canonical_name(self, name: str) -> str:
        key = canonical_platform_name(name)
        if key not in self._by_name:
            raise UnsupportedPlatformError(name, self.names())
        return key

    def get(self, name: str) -> Platform:
        return self._by_name[self.canonical_name(name)]

    def validate_option_names(self, options: BuildOptions) -> None:
        """Fail early on platform names the registry does not know."""
        for name in [*options.disabled_platforms, *options.platform_versions]:
            self.canonical_name(name)
        if options.platform:
            self.canonical_name(options.platform)


def _detect_all(
    platforms: list[Platform], context: BuildScriptGeneratorContext
) -> list[DetectedPlatform]:
    if not platforms:
        return []
    with ThreadPoolExecutor(max_workers=len(platforms)) as pool:
        # map() keeps declaration order and re-raises the first failure in that order.
        results = list(pool.map(lambda p: p.detect(context), platforms))
    return [DetectedPlatform(p, r) for p, r in zip(platforms, results) if r is not None]


def detect_platforms(
    context: BuildScriptGeneratorContext, registry: PlatformRegistry
) -> list[DetectedPlatform]:
    """Detect, resolve versions and order the platforms to build.

    Raises NoPlatformDetectedError when nothing applies and AmbiguousPlatformError
    when several platforms apply but multi-platform builds are disabled.
    """
    options = context.options
    root = context.source_repo.root_path
    registry.validate_option_names(options)

    if options.platform:
        return _detect_forced(context, registry)

    enabled = [p for p in registry if p.is_enabled(context)]
    logger.debug("Running detectors: %s", ", ".join(p.name for p in enabled))
    detected = _detect_all(enabled, context)
    if not detected:
        raise NoPlatformDetectedError(root)

    if len(detected) > 1:
        multi = [d for d in detected if d.platform.is_enabled_for_multi_platform_build(context)]
        dropped = [d.name for d in detected if d not in multi]
        if dropped and multi:
            logger.info("Ignoring %s alongside %s", ", ".join(dropped), ", ".join(d.name for d in multi))
            detected = multi

    if len(detected) > 1 and not options.enable_multi_platform_build:
        raise AmbiguousPlatformError(d.name for d in detected)

    for d in detected:
        logger.info("Detected platform %s version %s", d.name, d.result.platform_version or "-")
    return detected


def _detect_forced(
    context: BuildScriptGeneratorContext, registry: PlatformRegistry
) -> list[DetectedPlatform]:
    options = context.options
    forced = registry.get(options.platform or "")
    if not forced.is_enabled(context):
        raise ConfigurationError(f"Platform '{forced.name}' is forced but also disabled.")

    result = forced.detect(context)
    if result is None:
        if not options.platform_version:
            raise NoPlatformDetectedError(context.source_repo.root_path, forced.name)
        logger.info("%s not detected; using forced version %s", forced.name, options.platform_version)
        result = forced.create_result(options.platform_version)
        forced.resolve_versions(context, result)
    detected = [DetectedPlatform(forced, result)]

    if options.enable_multi_platform_build:
        others = [
            p
            for p in registry
            if p is not forced
            and p.is_enabled(context)
            and p.is_enabled_for_multi_platform_build(context)
        ]
        detected.extend(_detect_all(others, context))
    return detected
