"""Read-only view over an application source tree.

All paths are relative to the repository root. Paths that escape the root are
rejected so detectors can never read outside the app being built.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from platform_builder.errors import ConfigurationError


class SourceRepo:
    def __init__(self, root: Path | str):
        root_path = Path(root).resolve()
        if not root_path.is_dir():
            raise ConfigurationError(f"Source directory '{root_path}' does not exist.")
        self._root = root_path

    def __repr__(self) -> str:
        return f"SourceRepo({str(self._root)!r})"

    @property
    def root_path(self) -> str:
        return str(self._root)

    def _resolve(self, *parts: str) -> Path:
        rel = PurePosixPath(*(p.replace("\\", "/") for p in parts))
        if rel.is_absolute():
            raise ValueError(f"Expected a path relative to the repo root, got '{rel}'")
        full = (self._root / rel).resolve()
        if full != self._root and self._root not in full.parents:
            raise ValueError(f"Path '{rel}' escapes the repo root '{self._root}'")
        return full

    def full_path(self, *parts: str) -> str:
        return str(self._resolve(*parts))

    def file_exists(self, *parts: str) -> bool:
        return self._resolve(*parts).is_file()

    def dir_exists(self, *parts: str) -> bool:
        return self._resolve(*parts).is_dir()

    def read_file(self, *parts: str) -> str:
        """Return file text; raises OSError when the file is missing or unreadable."""
        return self._resolve(*parts).read_text(encoding="utf-8")

    def read_all_lines(self, *parts: str) -> list[str]:
        return self.read_file(*parts).splitlines()

    def enumerate_files(self, pattern: str, recursive: bool = False) -> list[str]:
        """Relative POSIX paths of files matching *pattern*, sorted."""
        matches = self._root.rglob(pattern) if recursive else self._root.glob(pattern)
        return sorted(
            p.relative_to(self._root).as_posix() for p in matches if p.is_file()
        )
