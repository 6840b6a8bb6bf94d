# src/buildplan/config/core.py

"""Synthesis settings schema and resolution.

Settings hold the policy knobs that stay constant across builds of one
project (public path, inline-asset threshold, lint strictness). They are
resolved once at the entry point, frozen, and passed explicitly into
synthesis:

- Single source of truth for fields, types and defaults (``Settings``)
- Immutable runtime payload (``FrozenSettings``)
- Audit of where each value came from (``SourceMap``)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from functools import cache
from typing import TYPE_CHECKING, Any, Literal, overload

from pydantic import BaseModel, Field, ValidationError, field_validator

from buildplan.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_BROWSERS: tuple[str, ...] = (
    ">1%",
    "last 4 versions",
    "Firefox ESR",
    "not ie < 9",
)

# --- Schema (Pydantic wall) ---


class Settings(BaseModel):
    """Pydantic schema for synthesis settings.

    All resolution flows through this schema so every layer (file, env,
    overrides) is validated the same way.
    """

    # Extensions are always served from the root of their package.
    public_path: str = Field(default="/", min_length=1)
    # Exposed as %PUBLIC_URL% and process.env.PUBLIC_URL, without trailing slash.
    public_url: str = Field(default="")
    # Bytes; assets at or under the limit become data URLs. 0 never inlines.
    inline_asset_limit: int = Field(default=0, ge=0)
    strict_lint: bool = Field(default=False)
    node_env: str = Field(default="development", min_length=1)
    browsers: tuple[str, ...] = Field(default=DEFAULT_BROWSERS, min_length=1)
    media_name: str = Field(default="media/[name].[hash:8].[ext]", min_length=1)

    model_config = {"extra": "forbid"}

    @field_validator("public_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> Any:
        """``%PUBLIC_URL%/icon.png`` reads better than ``%PUBLIC_URL%icon.png``."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("browsers", mode="before")
    @classmethod
    def split_browsers(cls, v: Any) -> Any:
        """Accept a comma-separated string, as set through the environment."""
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        return v


@cache
def _default_settings() -> dict[str, Any]:
    return Settings().model_dump()


# --- Immutable runtime payload ---


@dataclass(frozen=True)
class FrozenSettings:
    """Validated settings passed into synthesis."""

    public_path: str = "/"
    public_url: str = ""
    inline_asset_limit: int = 0
    strict_lint: bool = False
    node_env: str = "development"
    browsers: tuple[str, ...] = DEFAULT_BROWSERS
    media_name: str = "media/[name].[hash:8].[ext]"

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping for logging and printing."""
        data = asdict(self)
        data["browsers"] = list(self.browsers)
        return data


# --- Audit types ---


class Origin(str, Enum):
    """Source origin for a settings value."""

    DEFAULT = "default"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class FieldOrigin:
    """Tracks where a settings value came from."""

    origin: Origin
    env_key: str | None = None  # e.g., "BUILDPLAN_STRICT_LINT"
    file: str | None = None  # e.g., "pyproject.toml"


SourceMap = dict[str, FieldOrigin]

_DOTENV_LOADED: bool = False


def _try_load_dotenv() -> None:
    """Load a project ``.env`` file once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    from dotenv import load_dotenv

    load_dotenv()
    _DOTENV_LOADED = True


# --- Public resolution API ---


@overload
def resolve_settings(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[True],
) -> tuple[FrozenSettings, SourceMap]: ...


@overload
def resolve_settings(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[False] = ...,
) -> FrozenSettings: ...


def resolve_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    explain: bool = False,
) -> FrozenSettings | tuple[FrozenSettings, SourceMap]:
    """Resolve settings from all layers into ``FrozenSettings``.

    Precedence: defaults < pyproject ``[tool.buildplan]`` < ``BUILDPLAN_*``
    environment < overrides.

    Args:
        overrides: Programmatic settings overrides.
        explain: If True, also return the origin of every field.

    Returns:
        FrozenSettings, or ``(FrozenSettings, SourceMap)`` when explaining.

    Raises:
        ConfigurationError: If a layer holds an invalid or unknown field.
    """
    _try_load_dotenv()

    from .loaders import load_env, load_pyproject

    merged, sources = _resolve_layers(
        overrides=overrides or {},
        env=load_env(),
        project=load_pyproject(),
    )

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(part) for part in err.get("loc", ())) or "settings"
        origin = sources.get(field)
        hint = f"Set by {_origin_label(field, origin)}." if origin else None
        raise ConfigurationError(
            f"Invalid setting {field!r}: {err.get('msg')}", hint=hint
        ) from e

    frozen = FrozenSettings(**settings.model_dump())
    return (frozen, sources) if explain else frozen


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
) -> tuple[dict[str, Any], SourceMap]:
    """Merge layers with last-wins precedence, recording each field's origin."""
    from .utils import ENV_PREFIX, get_pyproject_path

    out: dict[str, Any] = dict(_default_settings())
    src: SourceMap = {k: FieldOrigin(origin=Origin.DEFAULT) for k in out}

    for origin, payload in (
        (Origin.PROJECT, project),
        (Origin.ENV, env),
        (Origin.OVERRIDES, overrides),
    ):
        for k, v in payload.items():
            out[k] = v
            if origin is Origin.ENV:
                src[k] = FieldOrigin(origin=origin, env_key=f"{ENV_PREFIX}{k.upper()}")
            elif origin is Origin.PROJECT:
                src[k] = FieldOrigin(origin=origin, file=str(get_pyproject_path()))
            else:
                src[k] = FieldOrigin(origin=origin)

    return out, src


# --- Audit helpers ---


def _origin_label(field: str, where: FieldOrigin) -> str:
    match where.origin:
        case Origin.ENV:
            from .utils import ENV_PREFIX

            return f"env:{where.env_key or ENV_PREFIX + field.upper()}"
        case Origin.PROJECT:
            return f"file:{where.file or 'pyproject.toml'}"
        case _:
            return str(where.origin.value)


def audit_lines(sources: SourceMap) -> list[str]:
    """One ``field: origin`` line per known field, in schema order."""
    return [
        f"{field}: {_origin_label(field, sources[field])}"
        for field in Settings.model_fields
        if field in sources
    ]


# --- Minimal CLI entrypoint ---


def main(argv: list[str] | None = None) -> int:
    """``buildplan-config show|audit``."""
    import argparse
    import json
    import sys

    parser = argparse.ArgumentParser("buildplan-config")
    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("show")
    sub.add_parser("audit")
    args = parser.parse_args(argv)

    try:
        settings, sources = resolve_settings(explain=True)
    except ConfigurationError as e:
        sys.stderr.write(f"error: {e}\n")
        if e.hint:
            sys.stderr.write(f"hint: {e.hint}\n")
        return 1

    if args.cmd == "show":
        sys.stdout.write(json.dumps(settings.to_dict(), indent=2) + "\n")
    else:
        for line in audit_lines(sources):
            sys.stdout.write(line + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
