from __future__ import annotations

import pytest

from buildplan import BuildPlanError, ConfigurationError, InternalError

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("error_cls", [ConfigurationError, InternalError])
def test_errors_share_the_base_class(error_cls) -> None:
    err = error_cls("boom")

    assert isinstance(err, BuildPlanError)
    assert str(err) == "boom"
    assert err.hint is None


def test_hint_is_kept_separate_from_message() -> None:
    err = ConfigurationError("Duplicate bundle name: 'popup'", hint="Rename one bundle.")

    assert str(err) == "Duplicate bundle name: 'popup'"
    assert err.hint == "Rename one bundle."


def test_catching_the_base_class() -> None:
    with pytest.raises(BuildPlanError):
        raise ConfigurationError("bad option")
