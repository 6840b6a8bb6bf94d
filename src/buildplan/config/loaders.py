# src/buildplan/config/loaders.py

"""Settings loaders for the environment and project files.

Each loader returns a plain dictionary for the resolver to merge; none of
them validate beyond type coercion.
"""

from __future__ import annotations

import os
import tomllib
from typing import TYPE_CHECKING, Any

from . import utils

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

# Control variables that steer resolution but are not settings fields
META_ENV_FIELDS = {"pyproject_path"}


def _coerce_bool(v: str) -> bool:
    """Convert string to boolean using common conventions."""
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_env_value(value: str, target_type: Any) -> Any:
    """Coerce an env string to the schema type, keeping the string on failure."""
    if target_type is bool:
        return _coerce_bool(value)
    if target_type is int:
        try:
            return int(value)
        except ValueError:
            return value
    return value


def load_env() -> Mapping[str, Any]:
    """Load settings from ``BUILDPLAN_*`` environment variables.

    Values are coerced to the schema's bool/int field types; everything else
    stays a string for the schema to validate.
    """
    from .core import Settings

    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(utils.ENV_PREFIX):
            continue
        field_name = key[len(utils.ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        info = Settings.model_fields.get(field_name)
        target_type = info.annotation if info is not None else None
        config[field_name] = _coerce_env_value(value, target_type)
    return config


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file; a missing file is an empty layer.

    Raises:
        ConfigurationError: If the file exists but is not valid TOML.
    """
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        from buildplan.errors import ConfigurationError

        raise ConfigurationError(
            f"Could not parse {path}: {e}",
            hint="Fix the TOML syntax or point BUILDPLAN_PYPROJECT_PATH elsewhere.",
        ) from e


def load_pyproject() -> Mapping[str, Any]:
    """Load the ``[tool.buildplan]`` table from the project pyproject.toml."""
    data = _read_toml(utils.get_pyproject_path())
    section = data.get("tool", {}).get(utils.CONFIG_TOOL_NAME, {})
    return dict(section) if isinstance(section, dict) else {}
