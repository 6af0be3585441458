"""platform-builder CLI: detect platforms and generate build scripts.

Nothing here runs a build. ``build-script`` writes the script, the manifest
and a build plan; executing the script is left to the caller.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from platform_builder.config import BuildOptions
from platform_builder.core import create_context, prepare_build, write_build
from platform_builder.errors import (
    ConfigurationError,
    PlatformBuilderError,
    RepositoryShapeError,
    ScriptWriteError,
)
from platform_builder.logging import configure_logging
from platform_builder.package.manifest import read_manifest
from platform_builder.registry import PlatformRegistry, detect_platforms

app = typer.Typer(add_completion=False, help="Detect app platforms and generate build scripts")
console = Console()
err_console = Console(stderr=True)


def _exit_code(exc: PlatformBuilderError) -> int:
    if isinstance(exc, (ConfigurationError, RepositoryShapeError)):
        return 1
    if isinstance(exc, ScriptWriteError):
        return 3
    return 2


def _handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PlatformBuilderError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
            raise typer.Exit(code=_exit_code(exc)) from exc

    return wrapper


def _parse_properties(values: list[str] | None) -> dict[str, str]:
    props: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not key.strip():
            raise ConfigurationError(f"Invalid property '{item}', expected KEY=VALUE.")
        # A bare KEY means an empty value, e.g. -p compress_virtualenv.
        props[key.strip()] = value if sep else ""
    return props


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose)


@app.command()
@_handle_errors
def detect(
    path: str = typer.Argument(".", help="Path to a source directory"),
    platform: str | None = typer.Option(None, "--platform", help="Only consider this platform"),
    platform_version: str | None = typer.Option(None, "--platform-version"),
    multi_platform: bool = typer.Option(
        False, "--multi-platform", help="Allow more than one platform"
    ),
    prop: list[str] | None = typer.Option(
        None, "--property", "-p", help="KEY=VALUE build property", show_default=False
    ),
    as_json: bool = typer.Option(False, "--json", help="Print detector results as JSON"),
) -> None:
    options = BuildOptions.from_properties(
        _parse_properties(prop),
        platform=platform,
        platform_version=platform_version,
        enable_multi_platform_build=multi_platform or None,
    )
    context = create_context(Path(path), options)
    detected = detect_platforms(context, PlatformRegistry.create(options))

    if as_json:
        print(json.dumps([d.result.model_dump() for d in detected], indent=2))
        return

    table = Table(title=f"Detected platforms in {context.source_repo.root_path}")
    table.add_column("Platform", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Details")
    for d in detected:
        extra = d.result.model_dump(exclude={"platform_name", "platform_version"})
        details = ", ".join(f"{k}={v}" for k, v in extra.items() if v)
        table.add_row(d.name, d.result.platform_version or "-", details)
    console.print(table)


@app.command("build-script")
@_handle_errors
def build_script(
    path: str = typer.Argument(".", help="Path to a source directory"),
    output: str | None = typer.Option(None, "--output", "-o", help="Build output directory"),
    intermediate: str | None = typer.Option(
        None, "--intermediate", "-i", help="Copy sources here and build there"
    ),
    manifest_dir: str | None = typer.Option(
        None, "--manifest-dir", help="Where the manifest and build plan are written"
    ),
    platform: str | None = typer.Option(None, "--platform", help="Force a platform"),
    platform_version: str | None = typer.Option(
        None, "--platform-version", help="Version of the forced platform"
    ),
    multi_platform: bool = typer.Option(
        False, "--multi-platform", help="Build every detected platform"
    ),
    dynamic_install: bool = typer.Option(
        False, "--dynamic-install", help="Install missing SDKs at build time"
    ),
    prop: list[str] | None = typer.Option(
        None, "--property", "-p", help="KEY=VALUE build property", show_default=False
    ),
    script_path: str | None = typer.Option(
        None, "--script-path", help="Script location (default <manifest-dir>/build.sh)"
    ),
) -> None:
    options = BuildOptions.from_properties(
        _parse_properties(prop),
        platform=platform,
        platform_version=platform_version,
        output_dir=Path(output) if output else None,
        intermediate_dir=Path(intermediate) if intermediate else None,
        manifest_dir=Path(manifest_dir) if manifest_dir else None,
        enable_multi_platform_build=multi_platform or None,
        dynamic_install_enabled=dynamic_install or None,
    )
    context = create_context(Path(path), options)
    prepared = write_build(prepare_build(context), Path(script_path) if script_path else None)

    table = Table(title="Build script")
    table.add_column("Platform", style="cyan")
    table.add_column("Version", style="green")
    for d in prepared.platforms:
        table.add_row(d.name, d.result.platform_version or "-")
    console.print(table)
    for written in prepared.written:
        rprint(f"[green]Written:[/green] {written}")


@app.command()
@_handle_errors
def platforms(
    versions_file: str | None = typer.Option(
        None, "--versions-file", help="Alternative version catalog (JSON)"
    ),
) -> None:
    options = BuildOptions.create(versions_file=Path(versions_file) if versions_file else None)
    table = Table(title="Platforms")
    table.add_column("Platform", style="cyan")
    table.add_column("Default")
    table.add_column("Supported versions")
    for platform in PlatformRegistry.create(options):
        if not platform.requires_sdk:
            table.add_row(platform.name, "-", "-")
            continue
        info = platform.get_version_info()
        table.add_row(platform.name, info.default_version, ", ".join(info.supported_versions))
    console.print(table)


@app.command()
@_handle_errors
def manifest(
    path: str = typer.Argument(..., help="Path to a build manifest"),
) -> None:
    manifest_path = Path(path)
    try:
        props = read_manifest(manifest_path)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read manifest '{manifest_path}': {exc.strerror or exc}") from exc
    print(json.dumps(props, indent=2))


if __name__ == "__main__":
    app()
