"""Non-fatal outcomes attached to pipeline stages.

``GateSkipped`` is recorded at synthesis time when a gated stage's
precondition fails. ``LintFinding`` and ``TypeFinding`` are produced later by
the bundler engine while it runs the pre-stages; they are modeled here so the
engine and callers share one vocabulary for deciding what is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class GateSkipped:
    """A conditionally-included stage whose precondition did not hold."""

    stage: str
    reason: str


@dataclass(frozen=True)
class Finding:
    """A single diagnostic reported against a source file."""

    path: str
    message: str
    line: int | None = None
    severity: Severity = "error"


@dataclass(frozen=True)
class LintFinding(Finding):
    """Reported by the pre-lint stage."""


@dataclass(frozen=True)
class TypeFinding(Finding):
    """Reported by the pre-typecheck stage."""
