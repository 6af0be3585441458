from __future__ import annotations

from pathlib import Path

import pytest

from platform_builder.config import BuildOptions
from platform_builder.repo import SourceRepo
from platform_builder.types import BuildScriptGeneratorContext


def write_tree(root: Path, files: dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_repo(tmp_path: Path):
    """Create a source tree under tmp_path from a {relative path: content} mapping."""

    def _make(files: dict[str, str], name: str = "app") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def make_options(tmp_path: Path):
    """BuildOptions that never see a Conda install or SDK cache from the host."""

    def _make(**values) -> BuildOptions:
        values.setdefault("conda_executable_path", tmp_path / "no-conda" / "conda")
        values.setdefault("dynamic_install_root_dir", tmp_path / "sdks")
        return BuildOptions.create(**values)

    return _make


@pytest.fixture
def make_context(make_repo, make_options):
    def _make(files: dict[str, str], **values) -> BuildScriptGeneratorContext:
        root = make_repo(files)
        return BuildScriptGeneratorContext(SourceRepo(root), make_options(**values))

    return _make
