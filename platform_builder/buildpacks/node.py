"""Node.js buildpack.

Picks the package manager from the lockfiles (yarn.lock -> yarn,
package-lock.json -> npm ci, otherwise npm install), runs the ``build`` script
when package.json declares one, then prunes dev dependencies.
"""

from __future__ import annotations

from pydantic import BaseModel

from platform_builder.detect.base import PlatformDetectorResult
from platform_builder.detect.node_pkg import PLATFORM_NAME, NodeDetector, NodeDetectorResult
from platform_builder.rendering import render
from platform_builder.types import BuildScriptGeneratorContext, BuildScriptSnippet

from .base import Platform

NODE_MODULES_DIR = "node_modules"


class NodeSnippetProperties(BaseModel):
    node_version: str
    has_package_json: bool
    package_manager: str
    has_build_script: bool
    prune_dev_dependencies: bool = True


def select_package_manager(result: NodeDetectorResult) -> str:
    if result.has_yarn_lock:
        return "yarn"
    if result.has_package_lock:
        return "npm-ci"
    return "npm"


class NodePlatform(Platform):
    name = PLATFORM_NAME
    result_type = NodeDetectorResult

    def create_detector(self) -> NodeDetector:
        return NodeDetector()

    def generate_bash_build_script_snippet(
        self, context: BuildScriptGeneratorContext, detector_result: PlatformDetectorResult
    ) -> BuildScriptSnippet:
        result = self._expect_result(detector_result, NodeDetectorResult)
        package_manager = select_package_manager(result)
        props = NodeSnippetProperties(
            node_version=result.platform_version,
            has_package_json=result.has_package_json,
            package_manager=package_manager,
            has_build_script=result.has_build_script,
        )
        return BuildScriptSnippet(
            bash_build_script_snippet=render("node.sh.j2", props),
            build_properties={
                "NodeVersion": result.platform_version,
                "nodePackageManager": package_manager.removesuffix("-ci"),
            },
        )

    def get_directories_to_exclude_from_copy_to_intermediate_dir(
        self,
        context: BuildScriptGeneratorContext,
        detector_result: PlatformDetectorResult | None = None,
    ) -> list[str]:
        # Dependencies are reinstalled from the lockfile.
        return [NODE_MODULES_DIR]
