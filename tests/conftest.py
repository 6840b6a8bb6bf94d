"""Pytest configuration and fixtures.

Provides environment isolation and shared path/settings fixtures. Isolation
fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
import os

import pytest

from buildplan import FrozenSettings
from tests.helpers import make_paths

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_settings_env(monkeypatch, tmp_path):
    """Clear BUILDPLAN_* variables and point settings at an empty project.

    Tests that need a pyproject layer write one to ``tmp_path / "pyproject.toml"``.
    """
    for key in list(os.environ.keys()):
        if key.startswith(("BUILDPLAN_", "REACT_APP_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BUILDPLAN_PYPROJECT_PATH", str(tmp_path / "pyproject.toml"))


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def app_paths():
    """Paths for an app with a tsconfig.json."""
    return make_paths()


@pytest.fixture
def untyped_paths():
    """Paths for an app without a tsconfig.json."""
    return make_paths(typed=False)


@pytest.fixture
def settings():
    """Default frozen settings."""
    return FrozenSettings()
