"""Dynamic SDK installation.

An SDK version counts as installed when its sentinel file exists under
``<install root>/<platform>/<version>/``. The generated snippet downloads and
extracts the SDK at build time and writes the sentinel last, so an interrupted
download is retried on the next build.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from platform_builder.logging import get_logger
from platform_builder.rendering import render

logger = get_logger(__name__)

SDK_DOWNLOAD_SENTINEL_FILE_NAME = ".sdk-download-sentinel"
SDK_STORAGE_BASE_URL_ENV = "SDK_STORAGE_BASE_URL"


class InstallerSnippetProperties(BaseModel):
    platform_name: str
    version: str
    install_dir: str
    archive_name: str
    sentinel_file_name: str
    sdk_storage_base_url: str | None = None
    sdk_storage_base_url_env: str = SDK_STORAGE_BASE_URL_ENV


class PlatformInstaller:
    def __init__(
        self,
        platform_name: str,
        install_root_dir: Path,
        sdk_storage_base_url: str | None = None,
    ):
        self.platform_name = platform_name
        self.install_root_dir = Path(install_root_dir)
        self.sdk_storage_base_url = sdk_storage_base_url

    def get_install_dir(self, version: str) -> Path:
        return self.install_root_dir / self.platform_name / version

    def is_version_already_installed(self, version: str) -> bool:
        sentinel = self.get_install_dir(version) / SDK_DOWNLOAD_SENTINEL_FILE_NAME
        installed = sentinel.is_file()
        logger.debug("%s %s installed: %s (%s)", self.platform_name, version, installed, sentinel)
        return installed

    def get_installer_script_snippet(self, version: str) -> str:
        props = InstallerSnippetProperties(
            platform_name=self.platform_name,
            version=version,
            install_dir=str(self.get_install_dir(version)),
            archive_name=f"{self.platform_name}-{version}.tar.gz",
            sentinel_file_name=SDK_DOWNLOAD_SENTINEL_FILE_NAME,
            sdk_storage_base_url=(self.sdk_storage_base_url or "").rstrip("/") or None,
        )
        return render("installer.sh.j2", props)
