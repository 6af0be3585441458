"""Build script assembly and output.

The final script wraps per-platform snippets, in platform order, between a
shared prologue (logging helpers, directory setup, SDK installers, PATH) and
epilogue (copy to the output directory).

Scripts are written to a temporary file in the destination directory, made
executable, then renamed into place: a failed write never leaves a runnable
partial script behind.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field

from platform_builder.errors import ScriptWriteError
from platform_builder.logging import get_logger
from platform_builder.rendering import render

logger = get_logger(__name__)

DEFAULT_SCRIPT_NAME = "build.sh"
_EXECUTABLE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


class PlatformSnippet(BaseModel):
    name: str
    version: str
    text: str


class BuildScriptProperties(BaseModel):
    source_dir: str
    output_dir: str
    intermediate_dir: str | None = None
    manifest_file: str
    exclude_from_intermediate_dir: list[str] = Field(default_factory=list)
    exclude_from_output_dir: list[str] = Field(default_factory=list)
    installer_snippets: list[str] = Field(default_factory=list)
    tool_paths: list[str] = Field(default_factory=list)
    snippets: list[PlatformSnippet] = Field(default_factory=list)


def render_build_script(props: BuildScriptProperties) -> str:
    return render("build_script.sh.j2", props)


def write_script(path: Path, text: str) -> Path:
    """Write *text* to *path* with 0755 permissions, creating parent directories."""
    path = Path(path)
    logger.info("Writing output script to '%s'", path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, _EXECUTABLE)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ScriptWriteError(str(path), exc.strerror or str(exc)) from exc
    return path

