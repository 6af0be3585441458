"""Python detector.

Markers (any one is enough):
- requirements.txt (or a custom requirements path), setup.py, pyproject.toml
- environment.yml / environment.yaml (Conda)
- runtime.txt, Jupyter notebooks or other *.py files at the root

Version hint: runtime.txt containing ``python-<version>``.
"""

from __future__ import annotations

from platform_builder.logging import get_logger
from platform_builder.repo import SourceRepo

from .base import PlatformDetectorResult, read_first_line

logger = get_logger(__name__)

PLATFORM_NAME = "python"
REQUIREMENTS_FILE_NAME = "requirements.txt"
RUNTIME_FILE_NAME = "runtime.txt"
CONDA_ENVIRONMENT_FILE_NAMES = ("environment.yml", "environment.yaml")
_PROJECT_FILES = ("setup.py", "pyproject.toml")
_RUNTIME_PREFIX = "python-"


class PythonDetectorResult(PlatformDetectorResult):
    has_requirements_txt: bool = False
    has_conda_environment_yml: bool = False
    conda_environment_file: str | None = None
    has_jupyter_notebook_files: bool = False
    has_setup_py: bool = False
    has_pyproject_toml: bool = False


class PythonDetector:
    def __init__(self, custom_requirements_txt_path: str | None = None):
        self.requirements_path = custom_requirements_txt_path or REQUIREMENTS_FILE_NAME

    def detect(self, repo: SourceRepo) -> PythonDetectorResult | None:
        has_requirements = repo.file_exists(self.requirements_path)
        conda_file = next(
            (name for name in CONDA_ENVIRONMENT_FILE_NAMES if repo.file_exists(name)), None
        )
        notebooks = repo.enumerate_files("*.ipynb")
        project_files = [name for name in _PROJECT_FILES if repo.file_exists(name)]
        has_runtime = repo.file_exists(RUNTIME_FILE_NAME)

        if not (has_requirements or conda_file or notebooks or project_files or has_runtime):
            if not repo.enumerate_files("*.py"):
                logger.debug("No Python markers in %s", repo.root_path)
                return None

        return PythonDetectorResult(
            platform_name=PLATFORM_NAME,
            platform_version=self._version_from_runtime_file(repo),
            has_requirements_txt=has_requirements,
            has_conda_environment_yml=conda_file is not None,
            conda_environment_file=conda_file,
            has_jupyter_notebook_files=bool(notebooks),
            has_setup_py="setup.py" in project_files,
            has_pyproject_toml="pyproject.toml" in project_files,
        )

    @staticmethod
    def _version_from_runtime_file(repo: SourceRepo) -> str:
        line = read_first_line(repo, RUNTIME_FILE_NAME)
        if not line:
            return ""
        if not line.lower().startswith(_RUNTIME_PREFIX):
            logger.warning("Ignoring %s without a '%s' prefix: %r", RUNTIME_FILE_NAME, _RUNTIME_PREFIX, line)
            return ""
        return line[len(_RUNTIME_PREFIX):].strip()
