"""Build manifest: a flat ``Key="Value"`` file read back at run time.

Each platform contributes its own keys; a key claimed by two platforms is a
generator bug and aborts the build.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from platform_builder.errors import InternalConsistencyError, ScriptWriteError

PLATFORM_NAME_KEY = "PlatformName"
RESERVED_KEYS = {PLATFORM_NAME_KEY}


def merge_manifest_properties(
    platform_properties: Iterable[tuple[str, dict[str, str]]],
) -> dict[str, str]:
    """Merge per-platform properties, in platform order, into one mapping."""
    merged: dict[str, str] = {}
    owners: dict[str, str] = {}
    names: list[str] = []
    for platform, props in platform_properties:
        names.append(platform)
        for key, value in props.items():
            if key in RESERVED_KEYS:
                raise InternalConsistencyError(
                    f"Platform '{platform}' wrote reserved manifest key '{key}'."
                )
            if key in owners:
                raise InternalConsistencyError(
                    f"Manifest key '{key}' written by both '{owners[key]}' and '{platform}'."
                )
            owners[key] = platform
            merged[key] = value
    merged[PLATFORM_NAME_KEY] = ",".join(names)
    return merged


_ESCAPES = {"\\": "\\", '"': '"', "\n": "n", "\r": "r"}
_UNESCAPES = {v: k for k, v in _ESCAPES.items()}


def _escape(value: str) -> str:
    # One manifest line per key: newlines must not leak through.
    return "".join("\\" + _ESCAPES[ch] if ch in _ESCAPES else ch for ch in value)


def _unescape(value: str) -> str:
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "\\")
            out.append(_UNESCAPES.get(nxt, nxt))
        else:
            out.append(ch)
    return "".join(out)


def format_manifest(properties: dict[str, str]) -> str:
    return "".join(f'{key}="{_escape(value)}"\n' for key, value in properties.items())


def write_manifest(path: Path, properties: dict[str, str]) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_manifest(properties), encoding="utf-8")
    except OSError as exc:
        raise ScriptWriteError(str(path), exc.strerror or str(exc)) from exc
    return path


def read_manifest(path: Path) -> dict[str, str]:
    """Parse a manifest written by `write_manifest`. Blank and ``#`` lines are skipped."""
    props: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = _unescape(value[1:-1])
        props[key.strip()] = value
    return props
