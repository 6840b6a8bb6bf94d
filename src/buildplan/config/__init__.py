# src/buildplan/config/__init__.py

"""Settings management for build-plan synthesis.

Resolve once, freeze, then flow: settings are resolved at the entry point
into an immutable ``FrozenSettings`` that synthesis receives explicitly.

Key exports:
- resolve_settings: Main API for settings resolution
- FrozenSettings: Immutable settings payload
- Settings: Pydantic schema for validation and defaults
"""

# ruff: noqa: I001

from .core import (
    DEFAULT_BROWSERS,
    FieldOrigin,
    FrozenSettings,
    Origin,
    Settings,
    SourceMap,
    audit_lines,
    resolve_settings,
)
from .utils import ENV_PREFIX, get_pyproject_path

__all__ = [  # noqa: RUF022
    # Main public API
    "resolve_settings",
    "FrozenSettings",
    # Schema and audit types
    "Settings",
    "Origin",
    "FieldOrigin",
    "SourceMap",
    "audit_lines",
    # Constants and helpers
    "DEFAULT_BROWSERS",
    "ENV_PREFIX",
    "get_pyproject_path",
]
