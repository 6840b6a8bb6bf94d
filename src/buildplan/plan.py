"""Build plan emission.

Merges the synthesized parts into one immutable ``BuildPlan``. No part is
renamed, dropped or reordered here.
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
from dataclasses import dataclass
from enum import Enum
import json
from pathlib import PurePath
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from buildplan.plugins import standard_plugins

if TYPE_CHECKING:
    from buildplan.diagnostics import GateSkipped
    from buildplan.entries import EntryMap
    from buildplan.environment import ClientEnvironment
    from buildplan.hot_update import HotUpdateMode
    from buildplan.pages import PageBinding
    from buildplan.paths import ResolvedPaths
    from buildplan.pipeline import Pipeline
    from buildplan.plugins import PluginDirective

#: Resolution order for extension-less imports; TypeScript first, then the
#: React Native Web variants, then plain JavaScript.
MODULE_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".web.ts",
    ".web.tsx",
    ".web.js",
    ".js",
    ".json",
    ".web.jsx",
    ".jsx",
)

MODULE_ALIASES: Mapping[str, str] = MappingProxyType(
    {"react-native": "react-native-web"}
)

# Node built-ins some libraries import but never use in the browser
NODE_SHIMS: Mapping[str, str] = MappingProxyType(
    {"dgram": "empty", "fs": "empty", "net": "empty", "tls": "empty"}
)


@dataclass(frozen=True)
class ResolutionRules:
    """How the engine resolves imports."""

    #: Searched in order; the plain ``node_modules`` lookup wins conflicts.
    modules: tuple[str, ...]
    extensions: tuple[str, ...]
    alias: Mapping[str, str]
    #: Relative imports may not leave this directory.
    module_scope: str
    node_module_roots: tuple[str, ...] = ()

    def allows_import(self, path: str | PurePath) -> bool:
        """Whether a resolved import target is inside the allowed scope.

        Files under the source root or any ``node_modules`` directory are
        allowed; anything else would bypass the source transforms.
        """
        target = PurePath(path)
        if "node_modules" in target.parts:
            return True
        return any(
            target.is_relative_to(root)
            for root in (self.module_scope, *self.node_module_roots)
        )


@dataclass(frozen=True)
class OutputSpec:
    """Where and how bundles are written."""

    path: str
    public_path: str
    filename: str = "js/[name].js"
    chunk_filename: str = "js/[name].[chunkhash:8].chunk.js"
    #: Adds ``/* filename */`` comments to generated requires.
    pathinfo: bool = True


@dataclass(frozen=True)
class BuildPlan:
    """The immutable plan consumed by the bundler engine.

    The engine must honor entry ordering, stage ordering and page-binding
    chunk isolation exactly as emitted.
    """

    entry: EntryMap
    page_bindings: tuple[PageBinding, ...]
    pipeline: Pipeline
    global_plugins: tuple[PluginDirective, ...]
    resolution: ResolutionRules
    output: OutputSpec
    devtool: bool | str
    environment: ClientEnvironment
    hot_update: HotUpdateMode
    node_shims: Mapping[str, str] = NODE_SHIMS
    performance_hints: bool = False
    strict_export_presence: bool = True

    @property
    def advisories(self) -> tuple[GateSkipped, ...]:
        return self.pipeline.advisories

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-compatible view of the plan."""
        data = {f.name: _plain(getattr(self, f.name)) for f in dataclasses.fields(self)}
        data["hot_update"] = {"url": self.hot_update.url}
        data["advisories"] = _plain(self.advisories)
        return data

    def to_json(self, *, indent: int | None = 2) -> str:
        """Deterministic JSON; identical inputs give identical text."""
        return json.dumps(self.to_dict(), indent=indent)


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, frozenset | set):
        return sorted(_plain(v) for v in value)
    if isinstance(value, tuple | list):
        return [_plain(v) for v in value]
    if isinstance(value, PurePath):
        return value.as_posix()
    return value


def emit_plan(
    *,
    entry: EntryMap,
    page_bindings: tuple[PageBinding, ...],
    pipeline: Pipeline,
    hot_update_plugins: tuple[PluginDirective, ...],
    environment: ClientEnvironment,
    hot_update: HotUpdateMode,
    paths: ResolvedPaths,
    output_path: str,
    public_path: str,
    devtool: bool | str,
) -> BuildPlan:
    """Aggregate synthesized parts into a ``BuildPlan``.

    Hot-update plugins precede the standard plugins, matching the order in
    which the engine applies them.
    """
    resolution = ResolutionRules(
        modules=(
            "node_modules",
            paths.app_node_modules.as_posix(),
            *(root.as_posix() for root in paths.extra_module_roots),
        ),
        extensions=MODULE_EXTENSIONS,
        alias=MODULE_ALIASES,
        module_scope=paths.source_root.as_posix(),
        node_module_roots=tuple(root.as_posix() for root in paths.node_module_roots),
    )
    return BuildPlan(
        entry=entry,
        page_bindings=page_bindings,
        pipeline=pipeline,
        global_plugins=(*hot_update_plugins, *standard_plugins(environment)),
        resolution=resolution,
        output=OutputSpec(path=output_path, public_path=public_path),
        devtool=devtool,
        environment=environment,
        hot_update=hot_update,
    )
