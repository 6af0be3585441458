"""Python buildpack.

Turns a resolved `PythonDetectorResult` into a bash snippet and manifest
properties. Two code paths:

- pip: a virtual environment (default ``pythonenv<major>.<minor>``) or a
  target package directory, optional compression of the virtual environment,
  optional sdist/wheel packaging and Django collectstatic.
- conda: taken when the repo has an environment file or notebooks and Conda is
  installed in the image. Conda owns its toolchain, so no dynamic SDK install
  and no PATH entry.

Option combinations are validated before any script text is produced.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

from platform_builder.config import TAR_GZ_OPTION, UNIVERSAL_WHEEL, ZIP_OPTION
from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.python_app import (
    PLATFORM_NAME,
    REQUIREMENTS_FILE_NAME,
    PythonDetector,
    PythonDetectorResult,
)
from platform_builder.errors import ConfigurationError, RepositoryShapeError
from platform_builder.logging import get_logger, log_dependencies
from platform_builder.rendering import render
from platform_builder.repo import SourceRepo
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform

logger = get_logger(__name__)

DEFAULT_TARGET_PACKAGE_DIRECTORY = "__platform_packages__"
ZIP_VIRTUALENV_FILE_NAME_FORMAT = "{}.zip"
TAR_GZ_VIRTUALENV_FILE_NAME_FORMAT = "{}.tar.gz"
DEFAULT_PYTHON2_CONDA_VERSION = "2.7.15"


class PythonManifestKeys:
    PYTHON_VERSION = "PythonVersion"
    VIRTUAL_ENV_NAME = "virtualEnvName"
    PACKAGE_DIR = "packagedir"
    COMPRESSED_VIRTUAL_ENV_FILE = "compressedVirtualEnvFile"
    PACKAGE_WHEEL = "packagewheel"
    BUILD_COMMANDS_FILE = "pythonBuildCommandsFile"
    CONDA_BUILD_COMMANDS_FILE = "condaBuildCommandsFile"


class PythonSnippetProperties(BaseModel):
    python_version: str
    python_major: str
    virtual_env_name: str
    virtual_env_module: str
    virtual_env_parameters: str
    packages_directory: str
    requirements_txt_path: str
    enable_collect_static: bool
    compress_virtual_env_command: str
    compressed_virtual_env_file_name: str
    run_python_package_command: bool
    python_package_wheel_property: str
    build_commands_file: str


class CondaSnippetProperties(BaseModel):
    python_version: str
    conda_profile_script: str
    environment_yml_file: str
    environment_template: str
    has_requirements_txt: bool
    requirements_txt_path: str
    build_commands_file: str


class CondaEnvironmentProperties(BaseModel):
    environment_name: str
    python_version: str


def get_default_virtual_env_name(python_version: str) -> str:
    parts = python_version.split(".") if python_version else []
    short = ".".join(parts[:2]) if len(parts) > 1 else python_version
    return f"pythonenv{short}"


def get_virtual_env_modules(python_version: str) -> tuple[str, str]:
    major = python_version.split(".")[0]
    if major == "2":
        return "virtualenv", ""
    if major == "3":
        return "venv", "--copies"
    message = f"Python version '{python_version}' is not supported"
    logger.error(message)
    raise ConfigurationError(message)


def get_virtual_env_pack_options(
    compress_option: str | None, virtual_env_name: str
) -> tuple[str | None, str | None]:
    """Return (compress command, archive file name); (None, None) when not compressing."""
    if compress_option == TAR_GZ_OPTION:
        return "tar -zcf", TAR_GZ_VIRTUALENV_FILE_NAME_FORMAT.format(virtual_env_name)
    if compress_option == ZIP_OPTION:
        return "zip -y -q -r", ZIP_VIRTUALENV_FILE_NAME_FORMAT.format(virtual_env_name)
    return None, None


class PythonPlatform(Platform):
    name = PLATFORM_NAME
    result_type = PythonDetectorResult

    def create_detector(self) -> PythonDetector:
        return PythonDetector(self.options.custom_requirements_txt_path)

    # --- option handling ------------------------------------------------

    @property
    def requirements_txt_path(self) -> str:
        return self.options.custom_requirements_txt_path or REQUIREMENTS_FILE_NAME

    def validate_options(self, context: BuildScriptGeneratorContext) -> None:
        opts = self.options
        wheel = (opts.package_wheel_type or "").strip()
        if wheel and not opts.package_command_enabled:
            raise ConfigurationError(
                "Option 'package-wheel-type' can't exist without package command being "
                "enabled. Please provide 'package-command-enabled' along with wheel type."
            )
        if wheel and wheel.lower() != UNIVERSAL_WHEEL:
            raise ConfigurationError(
                f"Option 'package-wheel-type' can only have '{UNIVERSAL_WHEEL}' as value, got '{wheel}'."
            )
        if opts.package_dir and opts.virtualenv_name:
            raise ConfigurationError(
                "Options 'package-dir' and 'virtualenv-name' are mutually exclusive. Please "
                "provide only the target package directory or virtual environment name."
            )

    def _virtual_env_name(self, detector_result: PlatformDetectorResult | None) -> str:
        """User-supplied name, else the default derived from the resolved version."""
        if self.options.virtualenv_name:
            return self.options.virtualenv_name
        if self.options.package_dir or detector_result is None:
            return ""
        if isinstance(detector_result, PythonDetectorResult) and self.is_conda_environment(
            detector_result
        ):
            return ""
        return get_default_virtual_env_name(detector_result.platform_version)

    def _build_commands_file(self, context: BuildScriptGeneratorContext) -> str:
        file_name = self.options.build_commands_filename
        base = self.options.manifest_dir or Path(context.source_repo.root_path)
        return os.path.join(str(base), file_name)

    def is_conda_environment(self, detector_result: PythonDetectorResult) -> bool:
        wants_conda = (
            detector_result.has_conda_environment_yml or detector_result.has_jupyter_notebook_files
        )
        return wants_conda and self.is_conda_installed_in_image()

    def is_conda_installed_in_image(self) -> bool:
        return Path(self.options.conda_executable_path).is_file()

    def conda_profile_script(self) -> str:
        """Shell hook shipped with the Conda install, e.g. /opt/conda/etc/profile.d/conda.sh."""
        root = Path(self.options.conda_executable_path).parent.parent
        return str(root / "etc" / "profile.d" / "conda.sh")

    # --- generation -----------------------------------------------------

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, PythonDetectorResult)
        self.validate_options(context)

        if self.is_conda_environment(result):
            return self._get_build_script_snippet_for_conda(context, result)

        opts = self.options
        python_version = result.platform_version
        logger.debug("Selected Python version: %s", python_version)
        build_commands_file = self._build_commands_file(context)

        manifest: dict[str, str] = {
            PythonManifestKeys.PYTHON_VERSION: python_version,
            PythonManifestKeys.BUILD_COMMANDS_FILE: build_commands_file,
        }
        wheel = (opts.package_wheel_type or "").lower()
        if opts.package_command_enabled and wheel:
            manifest[PythonManifestKeys.PACKAGE_WHEEL] = wheel

        package_dir = opts.package_dir or ""
        virtual_env_name = ""
        if not package_dir:
            # No package directory: default to a virtual environment.
            virtual_env_name = self._virtual_env_name(result)
            manifest[PythonManifestKeys.VIRTUAL_ENV_NAME] = virtual_env_name
        else:
            manifest[PythonManifestKeys.PACKAGE_DIR] = package_dir

        virtual_env_module = virtual_env_params = ""
        if python_version and virtual_env_name:
            virtual_env_module, virtual_env_params = get_virtual_env_modules(python_version)
            logger.debug("Using virtual environment %s, module %s", virtual_env_name, virtual_env_module)

        compress_command, compressed_file = get_virtual_env_pack_options(
            opts.compress_virtualenv, virtual_env_name
        ) if virtual_env_name else (None, None)
        if compressed_file:
            manifest[PythonManifestKeys.COMPRESSED_VIRTUAL_ENV_FILE] = compressed_file

        self._try_log_dependencies(python_version, context.source_repo)

        props = PythonSnippetProperties(
            python_version=python_version,
            python_major=python_version.split(".")[0],
            virtual_env_name=virtual_env_name,
            virtual_env_module=virtual_env_module,
            virtual_env_parameters=virtual_env_params,
            packages_directory=package_dir,
            requirements_txt_path=self.requirements_txt_path,
            enable_collect_static=opts.enable_collect_static,
            compress_virtual_env_command=compress_command or "",
            compressed_virtual_env_file_name=compressed_file or "",
            run_python_package_command=opts.package_command_enabled,
            python_package_wheel_property=wheel,
            build_commands_file=build_commands_file,
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("python.sh.j2", props),
            build_properties=manifest,
        )

    def _get_build_script_snippet_for_conda(
        self, context: BuildScriptGeneratorContext, result: PythonDetectorResult
    ) -> BuildScriptSnippet:
        build_commands_file = self._build_commands_file(context)
        manifest = {
            PythonManifestKeys.PYTHON_VERSION: result.platform_version,
            PythonManifestKeys.CONDA_BUILD_COMMANDS_FILE: build_commands_file,
        }

        environment_yml_file = ""
        environment_template = ""
        if result.has_conda_environment_yml and result.conda_environment_file:
            self._validate_environment_file(context.source_repo, result.conda_environment_file)
            environment_yml_file = result.conda_environment_file
        else:
            version = result.platform_version
            if version.split(".")[0] == "2":
                # Conda has trouble with Python 2 releases after 2.7.15.
                version = DEFAULT_PYTHON2_CONDA_VERSION
            environment_template = render(
                "conda_environment.yml.j2",
                CondaEnvironmentProperties(
                    environment_name="platform-builder-env", python_version=version
                ),
            )

        props = CondaSnippetProperties(
            python_version=result.platform_version,
            conda_profile_script=self.conda_profile_script(),
            environment_yml_file=environment_yml_file,
            environment_template=environment_template,
            has_requirements_txt=result.has_requirements_txt,
            requirements_txt_path=self.requirements_txt_path,
            build_commands_file=build_commands_file,
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("python_conda.sh.j2", props),
            build_properties=manifest,
        )

    @staticmethod
    def _validate_environment_file(repo: SourceRepo, path: str) -> None:
        try:
            data = yaml.safe_load(repo.read_file(path))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise RepositoryShapeError(str(exc), file_path=path) from exc
        if not isinstance(data, dict):
            raise RepositoryShapeError("expected a mapping at the top level", file_path=path)

    def _try_log_dependencies(self, python_version: str, repo: SourceRepo) -> None:
        path = self.requirements_txt_path
        if not repo.file_exists(path):
            return
        try:
            deps = [line for line in repo.read_all_lines(path) if not line.lstrip().startswith("#")]
        except (OSError, ValueError):
            logger.warning("Exception caught while logging dependencies", exc_info=True)
            return
        log_dependencies(logger, PLATFORM_NAME, python_version, deps)

    # --- installer / exclusions / tools --------------------------------

    def get_installer_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> str | None:
        if isinstance(detector_result, PythonDetectorResult) and self.is_conda_environment(
            detector_result
        ):
            logger.debug(
                "Application in the source directory is a Conda based app, "
                "so skipping dynamic installation of Python SDK."
            )
            return None
        return super().get_installer_script_snippet(context, detector_result)

    def get_directories_to_exclude_from_copy_to_build_output_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        virtual_env_name = self._virtual_env_name(detector_result)
        if not virtual_env_name:
            return []
        _, compressed_file = get_virtual_env_pack_options(
            self.options.compress_virtualenv, virtual_env_name
        )
        # Only the archive ships when the environment is compressed.
        return [virtual_env_name] if compressed_file else []

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        dirs = [DEFAULT_TARGET_PACKAGE_DIRECTORY]
        virtual_env_name = self._virtual_env_name(detector_result)
        if virtual_env_name:
            dirs.append(virtual_env_name)
            dirs.append(ZIP_VIRTUALENV_FILE_NAME_FORMAT.format(virtual_env_name))
            dirs.append(TAR_GZ_VIRTUALENV_FILE_NAME_FORMAT.format(virtual_env_name))
        return dirs

    def get_tools_to_be_set_in_path(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> dict[str, str] | None:
        result = self._expect_result(detector_result, PythonDetectorResult)
        # Conda is already on PATH.
        if self.is_conda_environment(result):
            return None
        return {PLATFORM_NAME: result.platform_version}

    def is_clean_repo(self, repo: SourceRepo) -> bool:
        return not repo.dir_exists(DEFAULT_TARGET_PACKAGE_DIRECTORY)
