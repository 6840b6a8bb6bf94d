"""Test helpers shared by unit and contract suites.

Plain functions rather than fixtures so hypothesis-driven tests can use them
without function-scoped fixture warnings.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from buildplan import BuildPlan, FrozenSettings, ResolvedPaths, synthesize

APP_ROOT = PurePosixPath("/work/extension")
POLYFILLS = "runtime/polyfills.js"
CLIENT = "runtime/hot-update/client.js"
BACKGROUND = "runtime/hot-update/background-script.js"


def make_paths(*, typed: bool = True, extra_roots: tuple[str, ...] = ()) -> ResolvedPaths:
    """ResolvedPaths for a fake app under ``/work/extension``."""
    return ResolvedPaths(
        app_root=APP_ROOT,
        source_root=APP_ROOT / "src",
        node_module_roots=(
            APP_ROOT / "node_modules",
            *(PurePosixPath(root) for root in extra_roots),
        ),
        output_root=APP_ROOT / "build",
        type_config_path=APP_ROOT / "tsconfig.json" if typed else None,
        polyfills_module=POLYFILLS,
        hot_update_client_module=CLIENT,
        hot_update_background_module=BACKGROUND,
    )


def make_plan(
    bundles: Any,
    options: Any = None,
    *,
    typed: bool = True,
    settings: FrozenSettings | None = None,
    **kwargs: Any,
) -> BuildPlan:
    """Synthesize with fixed paths and default settings."""
    return synthesize(
        bundles,
        options,
        paths=make_paths(typed=typed),
        settings=settings or FrozenSettings(),
        **kwargs,
    )
