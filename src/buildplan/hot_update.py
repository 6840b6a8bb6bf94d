"""Hot-update instrumentation.

Whether live reload is on is decided once per synthesis from
``BuildOptions.hot_update_url`` and carried as a ``HotUpdateMode`` value.
When enabled, every entry loads the reload client first, a dedicated
background-script entry is added, and the engine's runtime template is told
to fetch hot updates from the configured URL (extension pages have no
conventional origin, so relative update URLs resolve incorrectly).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from buildplan.errors import ConfigurationError
from buildplan.plugins import JSONP_TEMPLATE_REPLACE, PluginDirective, directive

if TYPE_CHECKING:
    from collections.abc import Collection

    from buildplan.entries import EntryMap
    from buildplan.options import BuildOptions
    from buildplan.paths import ResolvedPaths

log = logging.getLogger(__name__)

#: Reserved entry name for the synthetic background reload script.
BACKGROUND_ENTRY_NAME = "hot-update-background-script"


@dataclass(frozen=True)
class Disabled:
    """Hot update is off; the plan carries no reload instrumentation."""

    @property
    def url(self) -> None:
        return None


@dataclass(frozen=True)
class Enabled:
    """Hot update is on and routed to ``url``."""

    url: str


HotUpdateMode = Disabled | Enabled


@dataclass(frozen=True)
class Instrumentation:
    """Entries and plugins after hot-update instrumentation."""

    entry: EntryMap
    plugins: tuple[PluginDirective, ...] = ()


def hot_update_mode(options: BuildOptions) -> HotUpdateMode:
    """Decide the mode for one synthesis."""
    if options.hot_update_url is None:
        return Disabled()
    return Enabled(options.hot_update_url)


def instrument(
    entry: EntryMap,
    mode: HotUpdateMode,
    paths: ResolvedPaths,
    *,
    declared_names: Collection[str] = (),
) -> Instrumentation:
    """Apply hot-update instrumentation to ``entry``.

    Disabled mode returns the entries untouched and no plugins.

    Args:
        entry: Entry map from the entry synthesizer.
        mode: Mode decided by ``hot_update_mode``.
        paths: Source of the reload client and background modules.
        declared_names: Every bundle name in the manifest, including
            bundles without a JS entry.

    Raises:
        ConfigurationError: If a user bundle already uses the reserved
            background entry name.
    """
    match mode:
        case Disabled():
            return Instrumentation(entry=entry)
        case Enabled(url=url):
            if BACKGROUND_ENTRY_NAME in entry or BACKGROUND_ENTRY_NAME in declared_names:
                raise ConfigurationError(
                    f"Bundle name {BACKGROUND_ENTRY_NAME!r} is reserved when hot update is enabled",
                    hint="Rename the bundle; the hot-update background script uses this entry.",
                )
            client = paths.hot_update_client_module
            instrumented = {name: (client, *modules) for name, modules in entry.items()}
            instrumented[BACKGROUND_ENTRY_NAME] = (paths.hot_update_background_module,)
            log.debug(
                "Hot update enabled for %d entry point(s) via %s", len(entry), url
            )
            return Instrumentation(
                entry=MappingProxyType(instrumented),
                plugins=(directive(JSONP_TEMPLATE_REPLACE, hot_update_url=url),),
            )
