"""Pattern registry: the single source of truth for stage patterns.

Every stage's ``test`` and the fallback stage's ``exclude`` list are derived
from the same ``(name, patterns, kind)`` rules, so adding a transform can
never leave the fallback emitting those files a second time.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING

from buildplan.errors import ConfigurationError

from .types import LoaderSpec, StageKind, compile_pattern

if TYPE_CHECKING:
    from collections.abc import Iterable

SCRIPT_PATTERN = r"\.(js|jsx)$"
TYPED_SCRIPT_PATTERN = r"\.(ts|tsx)$"
STYLE_PATTERN = r"\.css$"
IMAGE_PATTERNS = (r"\.bmp$", r"\.gif$", r"\.jpe?g$", r"\.png$")
NATIVE_PATTERNS = (r"\.html$", r"\.json$")

# File names used to catch terminal rules that overlap through different patterns
PROBE_FILENAMES = (
    "index.js",
    "App.jsx",
    "component.web.js",
    "main.ts",
    "App.tsx",
    "styles.css",
    "icon.bmp",
    "spinner.gif",
    "photo.jpg",
    "photo.jpeg",
    "logo.png",
    "popup.html",
    "manifest.json",
    "logo.svg",
    "font.woff2",
    "notes.txt",
)


# Extension patterns such as r"\.css$", r"\.(md|markdown)$" or r"\.jpe?g$"
_EXTENSION_PATTERN = re.compile(r"^\\\.(?:\((?P<alts>[\w?|]+)\)|(?P<ext>[\w?]+))\$$")


def _expand_optional(text: str) -> tuple[str, ...]:
    """Spell out every variant of ``text`` where ``c?`` makes ``c`` optional."""
    index = text.find("?")
    if index < 0:
        return (text,)
    if index == 0:
        return ()
    head, rest = text[:index], text[index + 1 :]
    return tuple(
        variant
        for tail in _expand_optional(rest)
        for variant in (head + tail, head[:-1] + tail)
    )


def sample_filenames(pattern: str) -> tuple[str, ...]:
    """File names spelled out by an extension pattern.

    Returns an empty tuple for patterns that are not a plain extension
    match; those are only checked against ``PROBE_FILENAMES``.

    Example:
        sample_filenames(r"\\.(md|markdown)$")  # ("sample.md", "sample.markdown")
    """
    match = _EXTENSION_PATTERN.match(pattern)
    if match is None:
        return ()
    alternatives = (match["alts"] or match["ext"]).split("|")
    return tuple(
        f"sample.{extension}"
        for alternative in alternatives
        for extension in _expand_optional(alternative)
        if extension
    )


@dataclass(frozen=True)
class PatternRule:
    """A named set of file patterns owned by one stage.

    Default rules get their loaders from the stage builders. Additional
    rules carry their own ``loaders``.
    """

    name: str
    patterns: tuple[str, ...]
    kind: StageKind = StageKind.TRANSFORM
    loaders: tuple[LoaderSpec, ...] = ()
    #: Restrict the stage to the application source root.
    source_scoped: bool = False

    @property
    def terminal(self) -> bool:
        return not self.kind.is_pre


DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule("lint", (SCRIPT_PATTERN,), StageKind.PRE_LINT, source_scoped=True),
    PatternRule(
        "typecheck", (TYPED_SCRIPT_PATTERN,), StageKind.PRE_TYPECHECK, source_scoped=True
    ),
    PatternRule("scripts", (SCRIPT_PATTERN,), source_scoped=True),
    PatternRule("typed-scripts", (TYPED_SCRIPT_PATTERN,), source_scoped=True),
    PatternRule("styles", (STYLE_PATTERN,)),
    PatternRule("inline-assets", IMAGE_PATTERNS),
    PatternRule("native", NATIVE_PATTERNS, StageKind.NATIVE),
)

# Additional transform rules slot in ahead of these, keeping assets last
_TAIL_RULES = ("inline-assets", "native")


class PatternRegistry:
    """Validated, ordered collection of pattern rules.

    Example:
        registry = PatternRegistry().extended([PatternRule("svg", (r"\\.svg$",), loaders=...)])
        registry.fallback_exclusions()
    """

    def __init__(self, rules: Iterable[PatternRule] = DEFAULT_RULES) -> None:
        """Validate ``rules`` and freeze their order.

        Raises:
            ConfigurationError: If the rule set is malformed.
        """
        self._rules = tuple(rules)
        _validate(self._rules)

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        return self._rules

    def rule(self, name: str) -> PatternRule:
        """Return the rule called ``name``."""
        for rule in self._rules:
            if rule.name == name:
                return rule
        raise KeyError(name)

    def extended(self, extra: Iterable[PatternRule]) -> PatternRegistry:
        """Return a registry with ``extra`` transform rules added.

        New rules are placed before the asset and native rules.
        """
        extra = tuple(extra)
        if not extra:
            return self
        for rule in extra:
            if rule.kind is not StageKind.TRANSFORM:
                raise ConfigurationError(
                    f"Additional rule {rule.name!r} must be a transform, got {rule.kind.value}",
                    hint="Lint, type-check and fallback stages are built in.",
                )
            if not rule.loaders:
                raise ConfigurationError(
                    f"Additional rule {rule.name!r} has no loaders",
                    hint="Additional rules must name the loaders that process their files.",
                )
        head = [rule for rule in self._rules if rule.name not in _TAIL_RULES]
        tail = [rule for rule in self._rules if rule.name in _TAIL_RULES]
        return PatternRegistry((*head, *extra, *tail))

    def terminal_rules(self) -> tuple[PatternRule, ...]:
        return tuple(rule for rule in self._rules if rule.terminal)

    def fallback_exclusions(self) -> tuple[str, ...]:
        """Every pattern owned by a terminal rule, in registry order."""
        return tuple(
            pattern for rule in self.terminal_rules() for pattern in rule.patterns
        )


def _validate(rules: tuple[PatternRule, ...]) -> None:
    names: set[str] = set()
    owners: dict[str, str] = {}
    for rule in rules:
        if not rule.name:
            raise ConfigurationError("Pattern rule names must be non-empty")
        if rule.name in names:
            raise ConfigurationError(
                f"Duplicate pattern rule: {rule.name!r}",
                hint="Each stage name may appear once in the pipeline.",
            )
        names.add(rule.name)

        if rule.kind is StageKind.FALLBACK:
            raise ConfigurationError(
                f"Rule {rule.name!r} cannot be a fallback rule",
                hint="The fallback stage is derived from the other rules.",
            )
        if not rule.patterns:
            raise ConfigurationError(
                f"Rule {rule.name!r} has no patterns",
                hint="A stage without a test pattern would claim every file.",
            )
        for pattern in rule.patterns:
            if not isinstance(pattern, str) or not pattern:
                raise ConfigurationError(
                    f"Rule {rule.name!r} has an empty or non-string pattern: {pattern!r}"
                )
            try:
                compile_pattern(pattern)
            except re.error as e:
                raise ConfigurationError(
                    f"Rule {rule.name!r} has an invalid pattern {pattern!r}: {e}",
                ) from e
            if not rule.terminal:
                continue
            if pattern in owners:
                raise ConfigurationError(
                    f"Pattern {pattern!r} is claimed by both {owners[pattern]!r} and {rule.name!r}",
                    hint="Every file type must be owned by exactly one stage.",
                )
            owners[pattern] = rule.name

    terminal = [rule for rule in rules if rule.terminal]
    samples = dict.fromkeys(PROBE_FILENAMES)
    for rule in terminal:
        for pattern in rule.patterns:
            samples.update(dict.fromkeys(sample_filenames(pattern)))
    for filename in samples:
        claimants = [
            rule.name
            for rule in terminal
            if any(compile_pattern(p).search(filename) for p in rule.patterns)
        ]
        if len(claimants) > 1:
            raise ConfigurationError(
                f"{filename!r} is claimed by more than one stage: {', '.join(claimants)}",
                hint="Narrow the rule patterns so file types do not overlap.",
            )
