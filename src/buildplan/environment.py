"""Client environment injected into pages and scripts.

``raw`` values are interpolated into HTML templates (``%PUBLIC_URL%``);
``stringified`` values are substituted as compile-time constants in scripts
(``process.env.NODE_ENV``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

# Only variables with this prefix reach client code; anything else may be a secret.
CLIENT_VARIABLE_PATTERN = re.compile(r"^REACT_APP_")


@dataclass(frozen=True)
class ClientEnvironment:
    """Environment values visible to the built extension."""

    raw: Mapping[str, str]
    stringified: Mapping[str, Mapping[str, str]]


class EnvironmentProvider(Protocol):
    """Supplies the client environment for one synthesis."""

    def get_environment(
        self, public_url: str, hot_update_url: str | None
    ) -> ClientEnvironment:
        """Return the environment for ``public_url`` and the hot-update URL."""
        ...


@dataclass(frozen=True)
class ClientEnvironmentProvider:
    """Default provider over an explicit variable snapshot.

    Example:
        provider = ClientEnvironmentProvider(dict(os.environ), node_env="production")
    """

    variables: Mapping[str, str] = field(default_factory=dict)
    node_env: str = "development"

    def get_environment(
        self, public_url: str, hot_update_url: str | None
    ) -> ClientEnvironment:
        """Collect client variables plus the reserved keys.

        ``HOT_UPDATE_URL`` is always present so the reload client and the
        background script can read it; it is empty when hot update is off.
        """
        raw: dict[str, str] = {
            key: str(self.variables[key])
            for key in sorted(self.variables)
            if CLIENT_VARIABLE_PATTERN.match(key)
        }
        raw["NODE_ENV"] = self.node_env
        raw["PUBLIC_URL"] = public_url
        raw["HOT_UPDATE_URL"] = hot_update_url or ""

        stringified = {key: json.dumps(value) for key, value in raw.items()}
        return ClientEnvironment(
            raw=MappingProxyType(raw),
            stringified=MappingProxyType(
                {"process.env": MappingProxyType(stringified)}
            ),
        )
