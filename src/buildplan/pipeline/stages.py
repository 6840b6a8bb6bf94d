"""Stage builders for the default pattern rules."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from buildplan.diagnostics import GateSkipped
from buildplan.paths import TYPE_CONFIG_FILENAME

from .types import LoaderSpec, PipelineStage, StageKind

if TYPE_CHECKING:
    from buildplan.config import FrozenSettings
    from buildplan.paths import ResolvedPaths

    from .registry import PatternRegistry, PatternRule


@dataclass(frozen=True)
class StageContext:
    """Inputs shared by every stage builder."""

    paths: ResolvedPaths
    settings: FrozenSettings

    @property
    def source_scope(self) -> tuple[str, ...]:
        return (self.paths.source_root.as_posix(),)


def _loader(name: str, /, **options: Any) -> LoaderSpec:
    return LoaderSpec(loader=name, options=MappingProxyType(options))


def _scope(rule: PatternRule, ctx: StageContext) -> tuple[str, ...]:
    return ctx.source_scope if rule.source_scoped else ()


def type_config_gate(stage: str, paths: ResolvedPaths) -> GateSkipped | None:
    """Skip typed stages when the project has no type configuration."""
    if paths.type_config_path is not None:
        return None
    return GateSkipped(
        stage=stage,
        reason=f"{TYPE_CONFIG_FILENAME} was not found in {paths.expected_type_config}",
    )


def build_lint_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    strict = ctx.settings.strict_lint
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(
            _loader(
                "eslint-loader",
                formatter="react-dev-utils/eslintFormatter",
                base_config=MappingProxyType(
                    {
                        "env": MappingProxyType({"webextensions": True}),
                        "extends": ("eslint-config-react-app",),
                    }
                ),
                ignore=False,
                use_eslintrc=False,
                fail_on_error=strict,
            ),
        ),
        strict=strict,
    )


def build_typecheck_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(_loader("tslint-loader"),),
        gate=type_config_gate(rule.name, ctx.paths),
        strict=ctx.settings.strict_lint,
    )


def build_script_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(
            _loader(
                "babel-loader",
                babelrc=False,
                presets=("babel-preset-react-app",),
                # Caches results in node_modules/.cache/babel-loader
                cache_directory=True,
            ),
        ),
    )


def build_typed_script_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    gate = type_config_gate(rule.name, ctx.paths)
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(
            # Reports the gate message if a typed file is imported anyway
            _loader(
                "filter-loader",
                type_config=ctx.paths.expected_type_config.as_posix(),
                fail_message=(
                    f"{TYPE_CONFIG_FILENAME} was not found in "
                    f"{ctx.paths.expected_type_config}"
                ),
            ),
            _loader("ts-loader"),
        ),
        gate=gate,
    )


def build_style_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(
            _loader("style-loader"),
            _loader("css-loader", import_loaders=1),
            _loader(
                "postcss-loader",
                # Required for external CSS imports
                ident="postcss",
                plugins=(
                    _loader("postcss-flexbugs-fixes"),
                    _loader(
                        "autoprefixer",
                        browsers=ctx.settings.browsers,
                        flexbox="no-2009",
                    ),
                ),
            ),
        ),
    )


def build_inline_asset_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=(
            _loader(
                "url-loader",
                limit=ctx.settings.inline_asset_limit,
                name=ctx.settings.media_name,
            ),
        ),
    )


def build_rule_stage(rule: PatternRule, ctx: StageContext) -> PipelineStage:
    """Stage for native and additional rules, which carry their own loaders."""
    return PipelineStage(
        name=rule.name,
        kind=rule.kind,
        test=rule.patterns,
        include=_scope(rule, ctx),
        loaders=rule.loaders,
    )


def build_fallback_stage(registry: PatternRegistry, ctx: StageContext) -> PipelineStage:
    """Catch-all that emits every remaining file as-is."""
    return PipelineStage(
        name="fallback",
        kind=StageKind.FALLBACK,
        test=(),
        exclude=registry.fallback_exclusions(),
        loaders=(_loader("file-loader", name=ctx.settings.media_name),),
    )


STAGE_BUILDERS: dict[str, Callable[[PatternRule, StageContext], PipelineStage]] = {
    "lint": build_lint_stage,
    "typecheck": build_typecheck_stage,
    "scripts": build_script_stage,
    "typed-scripts": build_typed_script_stage,
    "styles": build_style_stage,
    "inline-assets": build_inline_asset_stage,
}
