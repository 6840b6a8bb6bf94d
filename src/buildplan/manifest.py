"""Phase 1: Bundle manifest normalization."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from os import PathLike, fspath
from typing import TYPE_CHECKING, Any

from buildplan.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = logging.getLogger(__name__)

# Accepted spellings for each field; camelCase matches package.json manifests.
_FIELD_ALIASES: dict[str, str] = {
    "bundleName": "bundle_name",
    "bundle_name": "bundle_name",
    "indexJs": "index_js",
    "index_js": "index_js",
    "indexHtml": "index_html",
    "index_html": "index_html",
}


@dataclass(frozen=True)
class BundleManifestEntry:
    """One independently-loadable unit of the extension.

    Example:
        BundleManifestEntry("popup", index_js="popup/index.js", index_html="popup/index.html")
    """

    bundle_name: str
    #: Entry script; ``None`` means the bundle has no JS entry point.
    index_js: str | None = None
    #: HTML template; ``None`` means no page is generated for the bundle.
    index_html: str | None = None

    def __post_init__(self) -> None:
        """Validate shapes early and normalize path-likes to strings."""
        if not isinstance(self.bundle_name, str) or not self.bundle_name.strip():
            raise ConfigurationError(
                f"bundle_name must be a non-empty string, got {self.bundle_name!r}",
                hint="Name each bundle after the extension page it builds, e.g. 'popup'.",
            )
        for field_name in ("index_js", "index_html"):
            value = getattr(self, field_name)
            if value is None:
                continue
            if isinstance(value, PathLike):
                object.__setattr__(self, field_name, fspath(value))
            elif not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"{field_name} of bundle {self.bundle_name!r} must be a path or None",
                    hint="Pass a file path string, a pathlib.Path, or None.",
                )

    @property
    def contributes(self) -> bool:
        """Whether the entry yields any entry point or page binding."""
        return self.index_js is not None or self.index_html is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BundleManifestEntry:
        """Build an entry from a manifest record.

        Accepts the camelCase keys used in ``package.json`` manifests
        (``bundleName``, ``indexJs``, ``indexHtml``) or their snake_case forms.
        """
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            field_name = _FIELD_ALIASES.get(key)
            if field_name is None:
                raise ConfigurationError(
                    f"Unknown bundle manifest key: {key!r}",
                    hint="Supported keys: bundleName, indexJs, indexHtml.",
                )
            kwargs[field_name] = value
        if "bundle_name" not in kwargs:
            raise ConfigurationError(
                "Bundle manifest record is missing bundleName",
                hint="Every bundle needs a unique bundleName.",
            )
        return cls(**kwargs)


def normalize_bundles(
    bundles: Iterable[BundleManifestEntry | Mapping[str, Any]],
) -> tuple[BundleManifestEntry, ...]:
    """Validate and normalize a manifest list.

    Args:
        bundles: Manifest entries, as ``BundleManifestEntry`` or mappings.

    Returns:
        The entries as a tuple, in input order.

    Raises:
        ConfigurationError: If a record is malformed or two entries share a
            bundle name.
    """
    normalized: list[BundleManifestEntry] = []
    seen: set[str] = set()
    for item in bundles:
        entry = (
            item
            if isinstance(item, BundleManifestEntry)
            else _entry_from_item(item)
        )
        if entry.bundle_name in seen:
            raise ConfigurationError(
                f"Duplicate bundle name: {entry.bundle_name!r}",
                hint="Bundle names key entries, pages and chunks; each must be unique.",
            )
        seen.add(entry.bundle_name)
        if not entry.contributes:
            log.debug("Bundle %r has neither indexJs nor indexHtml", entry.bundle_name)
        normalized.append(entry)
    return tuple(normalized)


def _entry_from_item(item: Any) -> BundleManifestEntry:
    if not hasattr(item, "items"):
        raise ConfigurationError(
            f"Expected BundleManifestEntry or mapping, got {type(item).__name__}",
            hint="Use BundleManifestEntry(...) or a dict with bundleName/indexJs/indexHtml.",
        )
    return BundleManifestEntry.from_mapping(item)
