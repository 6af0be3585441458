"""Build-script generation pipeline: detect -> generate -> assemble -> write."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from platform_builder.config import BuildOptions
from platform_builder.logging import get_logger
from platform_builder.package.manifest import merge_manifest_properties, write_manifest
from platform_builder.package.script import (
    DEFAULT_SCRIPT_NAME,
    BuildScriptProperties,
    PlatformSnippet,
    render_build_script,
    write_script,
)
from platform_builder.planner import BUILD_PLAN_FILE_NAME, write_build_plan
from platform_builder.registry import DetectedPlatform, PlatformRegistry, detect_platforms
from platform_builder.repo import SourceRepo
from platform_builder.types import BuildPlanModel, BuildScriptGeneratorContext, PlatformPlanModel
from platform_builder.validator import validate_manifest

logger = get_logger(__name__)


@dataclass
class PreparedBuild:
    """Everything produced for one invocation, before anything touches disk."""

    context: BuildScriptGeneratorContext
    platforms: list[DetectedPlatform]
    script: str
    manifest: dict[str, str]
    plan: BuildPlanModel
    written: list[Path] = field(default_factory=list)

    @property
    def manifest_file(self) -> Path:
        return self.context.manifest_dir / self.context.manifest_filename


def create_context(source_dir: Path | str, options: BuildOptions | None = None) -> BuildScriptGeneratorContext:
    return BuildScriptGeneratorContext(SourceRepo(source_dir), options or BuildOptions())


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def prepare_build(
    context: BuildScriptGeneratorContext, registry: PlatformRegistry | None = None
) -> PreparedBuild:
    registry = registry or PlatformRegistry.create(context.options)
    detected = detect_platforms(context, registry)

    # Reject bad option combinations before any script text exists.
    for d in detected:
        d.platform.validate_options(context)
    if context.intermediate_dir is None:
        for d in detected:
            if not d.platform.is_clean_repo(context.source_repo):
                logger.warning(
                    "Source directory '%s' holds build artifacts from an earlier %s build; "
                    "consider building in an intermediate directory (-i).",
                    context.source_repo.root_path,
                    d.name,
                )

    snippets: list[PlatformSnippet] = []
    platform_properties: list[tuple[str, dict[str, str]]] = []
    installers: list[str] = []
    tool_paths: list[str] = []
    exclude_intermediate: list[str] = []
    exclude_output: list[str] = []
    plans: list[PlatformPlanModel] = []

    for d in detected:
        platform, result = d.platform, d.result
        snippet = platform.generate_bash_build_script_snippet(context, result)
        snippets.append(
            PlatformSnippet(
                name=platform.name,
                version=result.platform_version,
                text=snippet.bash_build_script_snippet,
            )
        )
        platform_properties.append((platform.name, snippet.build_properties))

        installer = platform.get_installer_script_snippet(context, result)
        if installer:
            installers.append(installer)

        tools = platform.get_tools_to_be_set_in_path(context, result) or {}
        paths = [str(platform.get_tool_bin_dir(tool, version)) for tool, version in tools.items()]
        tool_paths.extend(paths)

        to_intermediate = platform.get_directories_to_exclude_from_copy_to_intermediate_dir(
            context, result
        )
        to_output = platform.get_directories_to_exclude_from_copy_to_build_output_dir(
            context, result
        )
        exclude_intermediate.extend(to_intermediate)
        exclude_output.extend(to_output)

        plans.append(
            PlatformPlanModel(
                name=platform.name,
                version=result.platform_version,
                tools=tools,
                tool_paths=paths,
                exclude_from_intermediate_dir=to_intermediate,
                exclude_from_output_dir=to_output,
                dynamic_install=installer is not None,
            )
        )

    manifest = merge_manifest_properties(platform_properties)
    validate_manifest(manifest)

    manifest_file = context.manifest_dir / context.manifest_filename
    intermediate = str(context.intermediate_dir) if context.intermediate_dir else None
    script = render_build_script(
        BuildScriptProperties(
            source_dir=context.source_repo.root_path,
            output_dir=str(context.output_dir),
            intermediate_dir=intermediate,
            manifest_file=str(manifest_file),
            exclude_from_intermediate_dir=_dedupe(exclude_intermediate),
            exclude_from_output_dir=_dedupe(exclude_output),
            installer_snippets=installers,
            tool_paths=_dedupe(tool_paths),
            snippets=snippets,
        )
    )
    plan = BuildPlanModel(
        source_dir=context.source_repo.root_path,
        output_dir=str(context.output_dir),
        intermediate_dir=intermediate,
        manifest_file=str(manifest_file),
        platforms=plans,
    )
    logger.info("Generated build script for %s", ", ".join(d.name for d in detected))
    return PreparedBuild(context, detected, script, manifest, plan)


def write_build(prepared: PreparedBuild, script_path: Path | None = None) -> PreparedBuild:
    """Write the manifest, the build plan and the script (last)."""
    context = prepared.context
    script_path = Path(script_path or context.manifest_dir / DEFAULT_SCRIPT_NAME)
    prepared.plan = prepared.plan.model_copy(update={"script_file": str(script_path)})

    prepared.written = [
        write_manifest(prepared.manifest_file, prepared.manifest),
        write_build_plan(context.manifest_dir / BUILD_PLAN_FILE_NAME, prepared.plan),
        write_script(script_path, prepared.script),
    ]
    return prepared


def generate_build_script(
    source_dir: Path | str,
    options: BuildOptions | None = None,
    script_path: Path | None = None,
) -> PreparedBuild:
    """Detect, generate and write everything for *source_dir*."""
    context = create_context(source_dir, options)
    return write_build(prepare_build(context), script_path)
