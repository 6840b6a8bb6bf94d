"""Pipeline assembly.

Builds the ordered stage list from the pattern registry: lint, type check,
transforms, inline assets, engine-native files and finally the fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from buildplan.errors import InternalError

from .registry import PatternRegistry
from .stages import STAGE_BUILDERS, StageContext, build_fallback_stage, build_rule_stage

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import PurePath

    from buildplan.config import FrozenSettings
    from buildplan.diagnostics import GateSkipped
    from buildplan.paths import ResolvedPaths

    from .registry import PatternRule
    from .types import PipelineStage

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pipeline:
    """Ordered, immutable stage list."""

    stages: tuple[PipelineStage, ...]

    def __iter__(self) -> Iterator[PipelineStage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def stage(self, name: str) -> PipelineStage:
        """Return the stage called ``name``."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)

    @property
    def terminal_stages(self) -> tuple[PipelineStage, ...]:
        return tuple(stage for stage in self.stages if not stage.kind.is_pre)

    @property
    def advisories(self) -> tuple[GateSkipped, ...]:
        return tuple(stage.gate for stage in self.stages if stage.gate is not None)

    def classify(self, path: str | PurePath) -> PipelineStage:
        """Return the single terminal stage that owns ``path``.

        Raises:
            InternalError: If zero or several terminal stages claim the path,
                which means the partition invariant is broken.
        """
        owners = [stage for stage in self.terminal_stages if stage.claims(path)]
        if len(owners) != 1:
            names = ", ".join(stage.name for stage in owners) or "none"
            raise InternalError(f"{path!s} is claimed by {len(owners)} stages ({names})")
        return owners[0]

    def stages_for(self, path: str | PurePath) -> tuple[PipelineStage, ...]:
        """Stages the engine runs for ``path``: applicable pre-stages, then its owner."""
        pre = tuple(
            stage
            for stage in self.stages
            if stage.kind.is_pre and stage.active and stage.applies_to(path)
        )
        return (*pre, self.classify(path))


def assemble_pipeline(
    paths: ResolvedPaths,
    settings: FrozenSettings,
    *,
    extra_rules: Iterable[PatternRule] = (),
    registry: PatternRegistry | None = None,
) -> Pipeline:
    """Assemble the pipeline for one synthesis.

    Args:
        paths: Resolved locations; the source root scopes script stages and
            the type configuration gates the typed stages.
        settings: Frozen synthesis settings.
        extra_rules: Additional transform rules, excluded from the fallback
            automatically.
        registry: Base registry; defaults to the built-in rules.

    Returns:
        The ordered pipeline.

    Raises:
        ConfigurationError: If the rule set is malformed.
    """
    registry = (registry or PatternRegistry()).extended(extra_rules)
    ctx = StageContext(paths=paths, settings=settings)

    stages = [
        STAGE_BUILDERS.get(rule.name, build_rule_stage)(rule, ctx)
        for rule in registry.rules
    ]
    stages.append(build_fallback_stage(registry, ctx))
    pipeline = Pipeline(stages=tuple(stages))

    for advisory in pipeline.advisories:
        log.info("Stage %r skipped: %s", advisory.stage, advisory.reason)
    log.debug("Assembled %d pipeline stage(s)", len(pipeline))
    return pipeline
