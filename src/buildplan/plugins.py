"""Global plugin directives for the bundler engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from buildplan.environment import ClientEnvironment

JSONP_TEMPLATE_REPLACE = "jsonp-template-replace"
INTERPOLATE_HTML = "interpolate-html"
NAMED_MODULES = "named-modules"
DEFINE = "define"
HOT_MODULE_REPLACEMENT = "hot-module-replacement"
CASE_SENSITIVE_PATHS = "case-sensitive-paths"
IGNORE = "ignore"


@dataclass(frozen=True)
class PluginDirective:
    """A named plugin the engine instantiates with ``options``."""

    name: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


def directive(name: str, **options: Any) -> PluginDirective:
    """Build a directive with read-only options."""
    return PluginDirective(name=name, options=MappingProxyType(options))


def standard_plugins(env: ClientEnvironment) -> tuple[PluginDirective, ...]:
    """Plugins every plan carries, in engine application order."""
    return (
        # %PUBLIC_URL% and friends in page templates
        directive(INTERPOLATE_HTML, replacements=env.raw),
        directive(NAMED_MODULES),
        directive(DEFINE, definitions=env.stringified),
        directive(HOT_MODULE_REPLACEMENT),
        directive(CASE_SENSITIVE_PATHS),
        # Moment.js locales are opt-in
        directive(IGNORE, resource_pattern=r"^\./locale$", context_pattern=r"moment$"),
    )
