"""Pipeline stage model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cache
from pathlib import PurePath
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from buildplan.diagnostics import Finding, GateSkipped


class StageKind(str, Enum):
    """Role of a stage in the source-processing order."""

    PRE_LINT = "pre-lint"
    PRE_TYPECHECK = "pre-typecheck"
    TRANSFORM = "transform"
    #: Handled by the bundler engine without a loader (JSON, page templates).
    NATIVE = "native"
    FALLBACK = "fallback"

    @property
    def is_pre(self) -> bool:
        """Pre-stages run before, and in addition to, a terminal stage."""
        return self in (StageKind.PRE_LINT, StageKind.PRE_TYPECHECK)


@cache
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a stage pattern with caching."""
    return re.compile(pattern)


def _as_posix(path: str | PurePath) -> str:
    return PurePath(path).as_posix()


@dataclass(frozen=True)
class LoaderSpec:
    """One loader invocation inside a stage, applied in listed order."""

    loader: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class PipelineStage:
    """A transformation step defined by a file pattern and a scope.

    ``test`` is empty only for the fallback stage, which claims every file
    not listed in ``exclude``.
    """

    name: str
    kind: StageKind
    test: tuple[str, ...]
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    loaders: tuple[LoaderSpec, ...] = ()
    #: Set when the stage's precondition failed; the stage stays in place.
    gate: GateSkipped | None = None
    #: Whether error findings from this stage fail the build.
    strict: bool = False

    @property
    def active(self) -> bool:
        return self.gate is None

    @property
    def enforce(self) -> str | None:
        """``"pre"`` for pre-stages, as the engine expects."""
        return "pre" if self.kind.is_pre else None

    def claims(self, path: str | PurePath) -> bool:
        """Whether the stage's ``test``/``exclude`` patterns select ``path``.

        Inclusion scope is ignored: it restricts where a stage runs, not
        which stage owns a file type.
        """
        target = _as_posix(path)
        if self.test and not any(compile_pattern(p).search(target) for p in self.test):
            return False
        return not any(compile_pattern(p).search(target) for p in self.exclude)

    def applies_to(self, path: str | PurePath) -> bool:
        """Whether the engine runs this stage's loaders for ``path``."""
        if not self.claims(path):
            return False
        if not self.include:
            return True
        candidate = PurePath(path)
        return any(candidate.is_relative_to(root) for root in self.include)

    def is_fatal(self, finding: Finding) -> bool:
        """Findings fail the build only from strict stages, and only errors."""
        return self.strict and finding.severity == "error"
