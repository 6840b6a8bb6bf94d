"""Page binding synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from buildplan.manifest import BundleManifestEntry


@dataclass(frozen=True)
class PageBinding:
    """Binds an HTML template to the chunks of exactly one bundle.

    Extension pages (popup, options, background) must not load each other's
    code, so ``chunk_filter`` never holds more than the bundle's own name.
    """

    bundle_name: str
    html_template: str
    chunk_filter: frozenset[str]
    #: Emitted page name, relative to the output root.
    filename: str
    #: Inject the bundle's script tags into the template.
    inject: bool = True


def synthesize_page_bindings(
    bundles: Sequence[BundleManifestEntry],
) -> tuple[PageBinding, ...]:
    """Emit one binding per bundle that declares an HTML template."""
    return tuple(
        PageBinding(
            bundle_name=bundle.bundle_name,
            html_template=bundle.index_html,
            chunk_filter=frozenset({bundle.bundle_name}),
            filename=f"{bundle.bundle_name}.html",
        )
        for bundle in bundles
        if bundle.index_html is not None
    )
