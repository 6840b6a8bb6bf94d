from __future__ import annotations

from types import MappingProxyType

import pytest

from buildplan.errors import ConfigurationError
from buildplan.hot_update import (
    BACKGROUND_ENTRY_NAME,
    Disabled,
    Enabled,
    hot_update_mode,
    instrument,
)
from buildplan.options import BuildOptions
from buildplan.plugins import JSONP_TEMPLATE_REPLACE
from tests.helpers import BACKGROUND, CLIENT, POLYFILLS

pytestmark = pytest.mark.unit

ENTRY = MappingProxyType(
    {
        "popup": (POLYFILLS, "popup/index.js"),
        "content": (POLYFILLS, "content.js"),
    }
)


def test_mode_is_decided_from_options() -> None:
    assert hot_update_mode(BuildOptions()) == Disabled()
    assert hot_update_mode(BuildOptions(hot_update_url="ws://localhost:9000")) == Enabled(
        "ws://localhost:9000"
    )
    assert Disabled().url is None


def test_disabled_mode_leaves_entries_untouched(app_paths) -> None:
    result = instrument(ENTRY, Disabled(), app_paths)

    assert result.entry is ENTRY
    assert result.plugins == ()


def test_enabled_mode_loads_client_first_everywhere(app_paths) -> None:
    result = instrument(ENTRY, Enabled("ws://localhost:9000"), app_paths)

    assert result.entry["popup"] == (CLIENT, POLYFILLS, "popup/index.js")
    assert result.entry["content"] == (CLIENT, POLYFILLS, "content.js")


def test_enabled_mode_adds_background_entry_last(app_paths) -> None:
    result = instrument(ENTRY, Enabled("ws://localhost:9000"), app_paths)

    assert list(result.entry) == ["popup", "content", BACKGROUND_ENTRY_NAME]
    assert result.entry[BACKGROUND_ENTRY_NAME] == (BACKGROUND,)


def test_enabled_mode_routes_updates_to_url(app_paths) -> None:
    result = instrument(ENTRY, Enabled("ws://localhost:9000"), app_paths)

    (plugin,) = result.plugins
    assert plugin.name == JSONP_TEMPLATE_REPLACE
    assert dict(plugin.options) == {"hot_update_url": "ws://localhost:9000"}


def test_input_entry_is_not_mutated(app_paths) -> None:
    instrument(ENTRY, Enabled("ws://localhost:9000"), app_paths)

    assert ENTRY["popup"] == (POLYFILLS, "popup/index.js")
    assert BACKGROUND_ENTRY_NAME not in ENTRY


def test_reserved_name_in_entries_is_rejected(app_paths) -> None:
    entry = MappingProxyType({BACKGROUND_ENTRY_NAME: (POLYFILLS, "bg.js")})

    with pytest.raises(ConfigurationError, match="reserved"):
        instrument(entry, Enabled("ws://localhost:9000"), app_paths)


def test_reserved_name_on_page_only_bundle_is_rejected(app_paths) -> None:
    with pytest.raises(ConfigurationError, match="reserved"):
        instrument(
            ENTRY,
            Enabled("ws://localhost:9000"),
            app_paths,
            declared_names={"popup", "content", BACKGROUND_ENTRY_NAME},
        )


def test_reserved_name_is_free_when_disabled(app_paths) -> None:
    entry = MappingProxyType({BACKGROUND_ENTRY_NAME: (POLYFILLS, "bg.js")})

    assert instrument(entry, Disabled(), app_paths).entry is entry
