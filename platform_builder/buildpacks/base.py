"""Platform contract: detection, version resolution and script generation.

A `Platform` pairs a detector with a bash snippet generator. Subclasses set the
class attributes and implement `generate_bash_build_script_snippet`; the base
class owns the hierarchical version rules and the dynamic-install decision,
which are identical for every platform.
"""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from platform_builder.config import BuildOptions
from platform_builder.detect.base import Detector, PlatformDetectorResult
from platform_builder.errors import InternalConsistencyError
from platform_builder.installer.sdk import PlatformInstaller
from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet, VersionInfo
from platform_builder.versioning import StaticVersionProvider, resolve_version

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=PlatformDetectorResult)


class Platform:
    name: str = ""
    result_type: type[PlatformDetectorResult] = PlatformDetectorResult
    requires_sdk: bool = True
    supports_multi_platform_build: bool = True
    # Directory under an SDK install dir that holds its executables.
    tool_bin_subdir: str = "bin"

    def __init__(
        self,
        options: BuildOptions,
        version_provider: StaticVersionProvider | None = None,
        detector: Detector | None = None,
        installer: PlatformInstaller | None = None,
    ):
        self.options = options
        self.version_provider = version_provider or StaticVersionProvider(
            self.name, options.versions_file
        )
        self.detector = detector or self.create_detector()
        self.installer = installer or PlatformInstaller(
            self.name, options.dynamic_install_root_dir, options.sdk_storage_base_url
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def create_detector(self) -> Detector:
        raise NotImplementedError

    # --- versions -------------------------------------------------------

    def get_version_info(self) -> VersionInfo:
        return self.version_provider.get_version_info()

    @property
    def supported_versions(self) -> list[str]:
        return self.get_version_info().supported_versions

    def create_result(self, version: str = "") -> PlatformDetectorResult:
        """Bare result for a platform forced by the user but not detected."""
        return self.result_type(platform_name=self.name, platform_version=version)

    def detect(self, context: BuildScriptGeneratorContext) -> PlatformDetectorResult | None:
        result = self.detector.detect(context.source_repo)
        if result is None:
            return None
        self.resolve_versions(context, result)
        return result

    def resolve_versions(
        self, context: BuildScriptGeneratorContext, result: PlatformDetectorResult
    ) -> None:
        if not self.requires_sdk:
            return
        requested = self._get_version_using_hierarchical_rules(result.platform_version)
        result.platform_version = resolve_version(self.name, requested, self.get_version_info())
        logger.debug("Resolved %s version %r -> %r", self.name, requested, result.platform_version)

    def _get_version_using_hierarchical_rules(self, detected_version: str) -> str:
        # User-supplied version wins over the detected one.
        user_version = self.options.version_for(self.name)
        if user_version:
            return user_version
        if detected_version:
            return detected_version
        return self.get_version_info().default_version

    # --- enablement -----------------------------------------------------

    def is_enabled(self, context: BuildScriptGeneratorContext) -> bool:
        return self.name not in self.options.disabled_platforms

    def is_enabled_for_multi_platform_build(self, context: BuildScriptGeneratorContext) -> bool:
        return self.supports_multi_platform_build

    def is_clean_repo(self, repo: SourceRepo) -> bool:
        return True

    # --- generation -----------------------------------------------------

    def validate_options(self, context: BuildScriptGeneratorContext) -> None:
        """Reject option combinations this platform cannot build with."""

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        raise NotImplementedError

    def get_installer_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> str | None:
        if not self.requires_sdk:
            return None
        if not self.options.dynamic_install_enabled:
            logger.debug("Dynamic install not enabled.")
            return None
        version = detector_result.platform_version
        if self.installer.is_version_already_installed(version):
            logger.debug(
                "%s version %s is already installed. So skipping installing it again.",
                self.name,
                version,
            )
            return None
        logger.debug(
            "%s version %s is not installed. So generating an installation script snippet for it.",
            self.name,
            version,
        )
        return self.installer.get_installer_script_snippet(version)

    def get_directories_to_exclude_from_copy_to_build_output_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return []

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        return []

    def get_tools_to_be_set_in_path(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> dict[str, str] | None:
        if not self.requires_sdk:
            return None
        return {self.name: detector_result.platform_version}

    def get_tool_bin_dir(self, tool: str, version: str) -> Path:
        """Directory to put on PATH for *tool* at *version*."""
        root = (
            self.options.dynamic_install_root_dir
            if self.options.dynamic_install_enabled
            else self.options.preinstalled_root_dir
        )
        install_dir = root / tool / version
        return install_dir / self.tool_bin_subdir if self.tool_bin_subdir else install_dir

    # --- helpers --------------------------------------------------------

    def _expect_result(self, detector_result: PlatformDetectorResult, result_type: type[ResultT]) -> ResultT:
        if not isinstance(detector_result, result_type):
            raise InternalConsistencyError(
                f"Expected 'detector_result' argument to be of type '{result_type.__name__}' "
                f"but got '{type(detector_result).__name__}'."
            )
        return detector_result
