"""Exception hierarchy for build-script generation.

Configuration errors are user-facing and name the offending option, platform or
version. Internal-consistency errors indicate a bug in a platform generator.
"""

from __future__ import annotations

from collections.abc import Iterable


class PlatformBuilderError(Exception):
    """Base class for every error raised by platform_builder."""


class ConfigurationError(PlatformBuilderError):
    """Raised for invalid, conflicting or incomplete build options."""


class UnsupportedPlatformError(ConfigurationError):
    def __init__(self, platform: str, known: Iterable[str]):
        self.platform = platform
        self.known = list(known)
        super().__init__(
            f"Platform '{platform}' is not supported. "
            f"Supported platforms are: {', '.join(self.known)}"
        )


class UnsupportedVersionError(ConfigurationError):
    """The requested version is not in the platform's version catalog."""

    def __init__(self, platform: str, version: str, supported_versions: Iterable[str]):
        self.platform = platform
        self.version = version
        self.supported_versions = list(supported_versions)
        super().__init__(
            f"Platform '{platform}' version '{version}' is unsupported. "
            f"Supported versions: {', '.join(self.supported_versions)}"
        )


class NoPlatformDetectedError(ConfigurationError):
    def __init__(self, root: str, platform: str | None = None):
        self.root = root
        self.platform = platform
        if platform:
            message = f"Could not detect platform '{platform}' in '{root}'."
        else:
            message = f"Could not detect a supported platform in '{root}'."
        super().__init__(message)


class AmbiguousPlatformError(ConfigurationError):
    def __init__(self, candidates: Iterable[str]):
        self.candidates = list(candidates)
        super().__init__(
            "Detected more than one platform: "
            f"{', '.join(self.candidates)}. Use --platform to pick one, "
            "or enable multi-platform builds."
        )


class RepositoryShapeError(PlatformBuilderError):
    """An essential marker file is malformed after its platform was selected."""

    def __init__(self, message: str, file_path: str | None = None):
        self.file_path = file_path
        if file_path:
            message = f"Malformed '{file_path}': {message}"
        super().__init__(message)


class InternalConsistencyError(PlatformBuilderError):
    """A generator broke a contract (manifest key collision, wrong result type)."""


class ScriptWriteError(PlatformBuilderError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to write '{path}': {reason}")
