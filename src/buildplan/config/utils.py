# src/buildplan/config/utils.py

"""Constants and path helpers shared by the settings modules."""

from __future__ import annotations

import os
from pathlib import Path

ENV_PREFIX = "BUILDPLAN_"
PYPROJECT_PATH_VAR = f"{ENV_PREFIX}PYPROJECT_PATH"
CONFIG_TOOL_NAME = "buildplan"


def get_pyproject_path() -> Path:
    """Return the project ``pyproject.toml``, honoring the path override."""
    if override := os.environ.get(PYPROJECT_PATH_VAR):
        return Path(override)
    return Path.cwd() / "pyproject.toml"
