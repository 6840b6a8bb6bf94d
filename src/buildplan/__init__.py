"""buildplan: build-plan synthesis for multi-entry browser extensions.

Public API:
    - synthesize(): Bundle manifests + options -> immutable BuildPlan
    - BundleManifestEntry: One extension bundle (popup, options, background)
    - BuildOptions: Output path, source maps, hot-update URL
    - resolve_settings(): Project-level synthesis settings
"""

from __future__ import annotations

import logging

from buildplan.config import FrozenSettings, resolve_settings
from buildplan.diagnostics import Finding, GateSkipped, LintFinding, TypeFinding
from buildplan.environment import (
    ClientEnvironment,
    ClientEnvironmentProvider,
    EnvironmentProvider,
)
from buildplan.errors import BuildPlanError, ConfigurationError, InternalError
from buildplan.hot_update import BACKGROUND_ENTRY_NAME, Disabled, Enabled, HotUpdateMode
from buildplan.manifest import BundleManifestEntry
from buildplan.options import BuildOptions
from buildplan.pages import PageBinding
from buildplan.paths import ResolvedPaths, resolve_paths
from buildplan.pipeline import (
    LoaderSpec,
    PatternRule,
    Pipeline,
    PipelineStage,
    StageKind,
)
from buildplan.plan import BuildPlan, OutputSpec, ResolutionRules
from buildplan.plugins import PluginDirective
from buildplan.synthesizer import synthesize

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("webext-buildplan")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("buildplan").addHandler(logging.NullHandler())

__all__ = [
    "BACKGROUND_ENTRY_NAME",
    "BuildOptions",
    "BuildPlan",
    "BuildPlanError",
    "BundleManifestEntry",
    "ClientEnvironment",
    "ClientEnvironmentProvider",
    "ConfigurationError",
    "Disabled",
    "Enabled",
    "EnvironmentProvider",
    "Finding",
    "FrozenSettings",
    "GateSkipped",
    "HotUpdateMode",
    "InternalError",
    "LintFinding",
    "LoaderSpec",
    "OutputSpec",
    "PageBinding",
    "PatternRule",
    "Pipeline",
    "PipelineStage",
    "PluginDirective",
    "ResolutionRules",
    "ResolvedPaths",
    "StageKind",
    "TypeFinding",
    "resolve_paths",
    "resolve_settings",
    "synthesize",
]
