"""Entry point synthesis."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from buildplan.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from buildplan.manifest import BundleManifestEntry

log = logging.getLogger(__name__)

#: Bundle name -> modules executed in listed order.
EntryMap = Mapping[str, tuple[str, ...]]


def synthesize_entries(
    bundles: Sequence[BundleManifestEntry], polyfills_module: str
) -> EntryMap:
    """Map every bundle with a JS entry to ``(polyfills, index_js)``.

    Bundles without ``index_js`` get no key. Key order follows the manifest.

    Raises:
        ConfigurationError: If two bundles share a name.
    """
    entry: dict[str, tuple[str, ...]] = {}
    names: set[str] = set()
    for bundle in bundles:
        if bundle.bundle_name in names:
            raise ConfigurationError(
                f"Duplicate bundle name: {bundle.bundle_name!r}",
                hint="Bundle names key entries, pages and chunks; each must be unique.",
            )
        names.add(bundle.bundle_name)
        if bundle.index_js is not None:
            entry[bundle.bundle_name] = (polyfills_module, bundle.index_js)

    log.debug("Synthesized %d entry point(s) from %d bundle(s)", len(entry), len(bundles))
    return MappingProxyType(entry)
