"""Path resolution contract and the default resolver.

The synthesizer never touches the filesystem itself. It receives a
``ResolvedPaths`` value; ``resolve_paths`` is the conventional way to build
one for an application directory.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path, PurePath

from buildplan.errors import ConfigurationError

TYPE_CONFIG_FILENAME = "tsconfig.json"

# Runtime modules shipped with the extension toolchain
POLYFILLS_MODULE = "buildplan-runtime/polyfills.js"
HOT_UPDATE_CLIENT_MODULE = "buildplan-runtime/hot-update/client.js"
HOT_UPDATE_BACKGROUND_MODULE = "buildplan-runtime/hot-update/background-script.js"


@dataclass(frozen=True)
class ResolvedPaths:
    """Canonical filesystem locations for one application."""

    app_root: PurePath
    source_root: PurePath
    node_module_roots: tuple[PurePath, ...]
    output_root: PurePath
    #: *None* when the project has no type configuration file.
    type_config_path: PurePath | None = None
    polyfills_module: str = POLYFILLS_MODULE
    hot_update_client_module: str = HOT_UPDATE_CLIENT_MODULE
    hot_update_background_module: str = HOT_UPDATE_BACKGROUND_MODULE

    def __post_init__(self) -> None:
        """Require the application's own module root."""
        if not self.node_module_roots:
            raise ConfigurationError(
                "node_module_roots must contain at least the app node_modules",
                hint="Use resolve_paths() to derive conventional locations.",
            )

    @property
    def expected_type_config(self) -> PurePath:
        """Where the type configuration file is looked for."""
        return self.type_config_path or self.app_root / TYPE_CONFIG_FILENAME

    @property
    def app_node_modules(self) -> PurePath:
        """The application's own ``node_modules`` directory."""
        return self.node_module_roots[0]

    @property
    def extra_module_roots(self) -> tuple[PurePath, ...]:
        """Fallback module roots after the application's own ``node_modules``."""
        return self.node_module_roots[1:]


def resolve_paths(
    app_root: str | os.PathLike[str],
    *,
    node_path: str | None = None,
) -> ResolvedPaths:
    """Resolve conventional locations under ``app_root``.

    Args:
        app_root: Application directory (the one holding ``package.json``).
        node_path: ``NODE_PATH``-style list of extra module roots separated by
            ``os.pathsep``. Relative entries resolve against ``app_root``.

    Returns:
        ResolvedPaths with ``type_config_path`` set only if the file exists.
    """
    root = Path(app_root).resolve()
    extra_roots = tuple(
        (root / entry).resolve()
        for entry in (node_path or "").split(os.pathsep)
        if entry
    )
    type_config = root / TYPE_CONFIG_FILENAME
    return ResolvedPaths(
        app_root=root,
        source_root=root / "src",
        node_module_roots=(root / "node_modules", *extra_roots),
        output_root=root / "build",
        type_config_path=type_config if type_config.is_file() else None,
    )
