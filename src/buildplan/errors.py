"""Exception hierarchy for buildplan."""

from __future__ import annotations


class BuildPlanError(Exception):
    """Base exception for all buildplan errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(BuildPlanError):
    """Manifest, options, settings or pattern validation failed.

    Always fatal: synthesis aborts and no partial plan is returned.
    """


class InternalError(BuildPlanError):
    """A buildplan internal error (bug) or invariant violation."""
