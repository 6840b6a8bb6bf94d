"""Build plan synthesis front door."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from buildplan.entries import synthesize_entries
from buildplan.environment import ClientEnvironmentProvider
from buildplan.hot_update import hot_update_mode, instrument
from buildplan.manifest import normalize_bundles
from buildplan.options import BuildOptions
from buildplan.pages import synthesize_page_bindings
from buildplan.paths import resolve_paths
from buildplan.pipeline import assemble_pipeline
from buildplan.plan import BuildPlan, emit_plan

if TYPE_CHECKING:
    from collections.abc import Iterable

    from buildplan.config import FrozenSettings
    from buildplan.environment import EnvironmentProvider
    from buildplan.manifest import BundleManifestEntry
    from buildplan.paths import ResolvedPaths
    from buildplan.pipeline import PatternRule

log = logging.getLogger(__name__)


def synthesize(
    bundles: Iterable[BundleManifestEntry | Mapping[str, Any]],
    options: BuildOptions | Mapping[str, Any] | None = None,
    *,
    paths: ResolvedPaths | None = None,
    environment: EnvironmentProvider | None = None,
    settings: FrozenSettings | None = None,
    extra_rules: Iterable[PatternRule] = (),
) -> BuildPlan:
    """Synthesize the build plan for a set of bundles.

    The result is a pure function of the arguments: identical inputs give
    equal plans with identical JSON. Pass ``settings`` and ``paths`` for a
    call without side effects; the defaults run ``resolve_settings()``, which
    loads a project ``.env`` into ``os.environ`` and reads
    ``./pyproject.toml``, and ``resolve_paths()``, which checks the working
    directory for ``tsconfig.json``.

    Args:
        bundles: Manifest entries or ``{bundleName, indexJs, indexHtml}``
            mappings. Names must be unique.
        options: Per-invocation build options.
        paths: Resolved locations. Defaults to ``resolve_paths(cwd)``.
        environment: Environment provider. Defaults to an empty variable set
            with ``settings.node_env``.
        settings: Frozen settings. Defaults to ``resolve_settings()``, which
            reads the environment and the project files.
        extra_rules: Additional transform rules for the pipeline.

    Returns:
        The immutable build plan.

    Raises:
        ConfigurationError: On duplicate or reserved bundle names, invalid
            options, or a malformed pattern set. No plan is returned.

    Example:
        plan = synthesize(
            [{"bundleName": "popup", "indexJs": "src/popup/index.js", "indexHtml": "src/popup/index.html"}],
            {"hotUpdateUrl": "ws://localhost:9000"},
        )
    """
    if options is None:
        options = BuildOptions()
    elif isinstance(options, Mapping):
        options = BuildOptions.from_mapping(options)
    if settings is None:
        from buildplan.config import resolve_settings

        settings = resolve_settings()
    if paths is None:
        paths = resolve_paths(Path.cwd())
    if environment is None:
        environment = ClientEnvironmentProvider(node_env=settings.node_env)

    manifest = normalize_bundles(bundles)
    mode = hot_update_mode(options)

    entry = synthesize_entries(manifest, paths.polyfills_module)
    instrumented = instrument(
        entry,
        mode,
        paths,
        declared_names=frozenset(bundle.bundle_name for bundle in manifest),
    )
    page_bindings = synthesize_page_bindings(manifest)
    pipeline = assemble_pipeline(paths, settings, extra_rules=extra_rules)
    env = environment.get_environment(settings.public_url, mode.url)

    plan = emit_plan(
        entry=instrumented.entry,
        page_bindings=page_bindings,
        pipeline=pipeline,
        hot_update_plugins=instrumented.plugins,
        environment=env,
        hot_update=mode,
        paths=paths,
        output_path=options.output_path or paths.output_root.as_posix(),
        public_path=settings.public_path,
        devtool=options.source_maps,
    )
    log.debug(
        "Synthesized plan: %d entries, %d pages, %d stages, %d plugins",
        len(plan.entry),
        len(plan.page_bindings),
        len(plan.pipeline),
        len(plan.global_plugins),
    )
    return plan
