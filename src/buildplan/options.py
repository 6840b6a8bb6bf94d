"""Build options supplied per synthesis call."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike, fspath
from typing import TYPE_CHECKING, Any

from buildplan.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

_FIELD_ALIASES: dict[str, str] = {
    "outputPath": "output_path",
    "output_path": "output_path",
    "sourceMaps": "source_maps",
    "source_maps": "source_maps",
    "hotUpdateUrl": "hot_update_url",
    "hot_update_url": "hot_update_url",
}


@dataclass(frozen=True)
class BuildOptions:
    """Immutable per-invocation build options.

    Defaults are applied here, before any derivation runs: an empty
    ``hot_update_url`` means hot update is off, and ``output_path=None``
    defers to the resolved output root.
    """

    #: Falls back to ``ResolvedPaths.output_root`` when *None*.
    output_path: str | None = None
    #: ``False`` disables source maps; a string names the devtool mode.
    source_maps: bool | str = False
    #: Reload transport URL, e.g. ``ws://localhost:9000``.
    hot_update_url: str | None = None

    def __post_init__(self) -> None:
        """Normalize defaults and validate option shapes."""
        if isinstance(self.output_path, PathLike):
            object.__setattr__(self, "output_path", fspath(self.output_path))
        if self.output_path is not None and (
            not isinstance(self.output_path, str) or not self.output_path
        ):
            raise ConfigurationError(
                "output_path must be a non-empty path or None",
                hint="Pass output_path='build' or leave it unset.",
            )

        if not isinstance(self.source_maps, bool) and (
            not isinstance(self.source_maps, str) or not self.source_maps.strip()
        ):
            raise ConfigurationError(
                "source_maps must be a bool or a devtool name",
                hint="Pass source_maps='cheap-module-source-map' or False.",
            )

        if self.hot_update_url is not None and not isinstance(self.hot_update_url, str):
            raise ConfigurationError(
                "hot_update_url must be a string or None",
                hint="Pass hot_update_url='ws://localhost:9000'.",
            )
        if self.hot_update_url is not None and not self.hot_update_url.strip():
            object.__setattr__(self, "hot_update_url", None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BuildOptions:
        """Build options from ``{outputPath, sourceMaps, hotUpdateUrl}``.

        snake_case keys are accepted as well.
        """
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            field_name = _FIELD_ALIASES.get(key)
            if field_name is None:
                raise ConfigurationError(
                    f"Unknown build option: {key!r}",
                    hint="Supported options: outputPath, sourceMaps, hotUpdateUrl.",
                )
            kwargs[field_name] = value
        return cls(**kwargs)
