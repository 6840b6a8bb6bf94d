"""End-to-end synthesis through the public API."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from buildplan import (
    BACKGROUND_ENTRY_NAME,
    BuildOptions,
    BundleManifestEntry,
    ClientEnvironmentProvider,
    ConfigurationError,
    Disabled,
    Enabled,
    FrozenSettings,
    LoaderSpec,
    PageBinding,
    PatternRule,
    synthesize,
)
from buildplan.plan import MODULE_EXTENSIONS
from buildplan.plugins import (
    CASE_SENSITIVE_PATHS,
    DEFINE,
    HOT_MODULE_REPLACEMENT,
    IGNORE,
    INTERPOLATE_HTML,
    JSONP_TEMPLATE_REPLACE,
    NAMED_MODULES,
)
from tests.helpers import APP_ROOT, BACKGROUND, CLIENT, POLYFILLS, make_paths, make_plan

pytestmark = pytest.mark.contract

POPUP = {"bundleName": "popup", "indexJs": "popup/index.js", "indexHtml": "popup/index.html"}
HOT = {"hotUpdateUrl": "ws://localhost:9000"}

STANDARD_PLUGINS = [
    INTERPOLATE_HTML,
    NAMED_MODULES,
    DEFINE,
    HOT_MODULE_REPLACEMENT,
    CASE_SENSITIVE_PATHS,
    IGNORE,
]


# =============================================================================
# Manifest scenarios
# =============================================================================


def test_single_bundle_without_hot_update() -> None:
    plan = make_plan([POPUP], {})

    assert dict(plan.entry) == {"popup": (POLYFILLS, "popup/index.js")}
    assert plan.page_bindings == (
        PageBinding("popup", "popup/index.html", frozenset({"popup"}), "popup.html"),
    )
    assert BACKGROUND_ENTRY_NAME not in plan.entry
    assert plan.hot_update == Disabled()
    assert [p.name for p in plan.global_plugins] == STANDARD_PLUGINS


def test_single_bundle_with_hot_update() -> None:
    plan = make_plan([POPUP], HOT)

    assert dict(plan.entry) == {
        "popup": (CLIENT, POLYFILLS, "popup/index.js"),
        BACKGROUND_ENTRY_NAME: (BACKGROUND,),
    }
    assert plan.hot_update == Enabled("ws://localhost:9000")
    assert [p.name for p in plan.global_plugins] == [JSONP_TEMPLATE_REPLACE, *STANDARD_PLUGINS]
    assert plan.global_plugins[0].options["hot_update_url"] == "ws://localhost:9000"


def test_hot_update_does_not_add_pages() -> None:
    plan = make_plan([POPUP], HOT)

    assert [b.bundle_name for b in plan.page_bindings] == ["popup"]


def test_duplicate_bundle_names_fail_before_any_plan() -> None:
    bundles = [
        {"bundleName": "options", "indexJs": "options/a.js"},
        {"bundleName": "options", "indexJs": "options/b.js"},
    ]

    with pytest.raises(ConfigurationError, match="Duplicate bundle name: 'options'"):
        make_plan(bundles)


def test_script_only_bundle_gets_entry_but_no_page() -> None:
    plan = make_plan([POPUP, {"bundleName": "bg", "indexJs": "bg.js", "indexHtml": None}])

    assert list(plan.entry) == ["popup", "bg"]
    assert plan.entry["bg"] == (POLYFILLS, "bg.js")
    assert "bg" not in {b.bundle_name for b in plan.page_bindings}


def test_page_only_bundle_gets_page_but_no_entry() -> None:
    plan = make_plan([BundleManifestEntry("options", index_html="options.html")])

    assert dict(plan.entry) == {}
    assert plan.page_bindings[0].chunk_filter == frozenset({"options"})


def test_empty_manifest_is_a_valid_plan() -> None:
    plan = make_plan([])

    assert dict(plan.entry) == {}
    assert plan.page_bindings == ()
    assert len(plan.pipeline) == 8


def test_reserved_name_is_rejected_when_hot_update_is_on() -> None:
    bundles = [{"bundleName": BACKGROUND_ENTRY_NAME, "indexHtml": "bg.html"}]

    assert make_plan(bundles).page_bindings[0].bundle_name == BACKGROUND_ENTRY_NAME
    with pytest.raises(ConfigurationError, match="reserved"):
        make_plan(bundles, HOT)


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Unknown build option: 'hotReloadUrl'"):
        make_plan([POPUP], {"hotReloadUrl": "ws://localhost:9000"})


# =============================================================================
# Plan-level properties
# =============================================================================


def test_identical_inputs_give_identical_plans() -> None:
    first = make_plan([POPUP, {"bundleName": "bg", "indexJs": "bg.js"}], HOT)
    second = make_plan([POPUP, {"bundleName": "bg", "indexJs": "bg.js"}], HOT)

    assert first == second
    assert first.to_json() == second.to_json()


def test_options_object_and_mapping_are_equivalent() -> None:
    assert make_plan([POPUP], HOT) == make_plan(
        [POPUP], BuildOptions(hot_update_url="ws://localhost:9000")
    )


def test_blank_hot_update_url_means_disabled() -> None:
    assert make_plan([POPUP], {"hotUpdateUrl": ""}).hot_update == Disabled()


def test_output_defaults_to_build_directory() -> None:
    plan = make_plan([POPUP])

    assert plan.output.path == (APP_ROOT / "build").as_posix()
    assert plan.output.public_path == "/"
    assert plan.output.filename == "js/[name].js"
    assert plan.devtool is False


def test_output_path_and_source_maps_are_passed_through() -> None:
    plan = make_plan([POPUP], {"outputPath": "dist", "sourceMaps": "cheap-module-source-map"})

    assert plan.output.path == "dist"
    assert plan.devtool == "cheap-module-source-map"


def test_public_path_comes_from_settings() -> None:
    plan = make_plan([POPUP], settings=FrozenSettings(public_path="/ext/", public_url="/ext"))

    assert plan.output.public_path == "/ext/"
    assert plan.environment.raw["PUBLIC_URL"] == "/ext"


def test_environment_exposes_hot_update_url() -> None:
    provider = ClientEnvironmentProvider({"REACT_APP_NAME": "Tabs"}, node_env="development")

    plan = make_plan([POPUP], HOT, environment=provider)

    assert plan.environment.raw["HOT_UPDATE_URL"] == "ws://localhost:9000"
    assert plan.environment.raw["REACT_APP_NAME"] == "Tabs"
    define = next(p for p in plan.global_plugins if p.name == DEFINE)
    assert define.options["definitions"] == plan.environment.stringified


def test_resolution_rules() -> None:
    plan = synthesize(
        [POPUP],
        paths=make_paths(extra_roots=("/opt/shared",)),
        settings=FrozenSettings(),
    )
    rules = plan.resolution

    assert rules.modules == (
        "node_modules",
        (APP_ROOT / "node_modules").as_posix(),
        "/opt/shared",
    )
    assert rules.extensions == MODULE_EXTENSIONS
    assert rules.alias["react-native"] == "react-native-web"
    assert rules.allows_import(APP_ROOT / "src" / "popup" / "App.js")
    assert rules.allows_import("/opt/shared/lodash/index.js")
    assert rules.allows_import("/elsewhere/node_modules/react/index.js")
    assert not rules.allows_import(APP_ROOT / "scripts" / "build.js")


def test_node_shims_and_engine_flags() -> None:
    plan = make_plan([POPUP])

    assert dict(plan.node_shims) == {"dgram": "empty", "fs": "empty", "net": "empty", "tls": "empty"}
    assert plan.performance_hints is False
    assert plan.strict_export_presence is True


def test_advisories_surface_on_the_plan() -> None:
    plan = make_plan([POPUP], typed=False)

    assert [a.stage for a in plan.advisories] == ["typecheck", "typed-scripts"]


def test_plan_serializes_to_plain_json() -> None:
    plan = make_plan([POPUP], HOT, typed=False)

    data = json.loads(plan.to_json())

    assert data["entry"]["popup"] == [CLIENT, POLYFILLS, "popup/index.js"]
    assert data["page_bindings"][0]["chunk_filter"] == ["popup"]
    assert data["hot_update"] == {"url": "ws://localhost:9000"}
    assert data["pipeline"]["stages"][0]["kind"] == "pre-lint"
    assert data["advisories"][0]["stage"] == "typecheck"
    assert data["global_plugins"][0]["name"] == JSONP_TEMPLATE_REPLACE


def test_defaults_resolve_from_working_directory(tmp_path, monkeypatch) -> None:
    (tmp_path / "tsconfig.json").write_text("{}")
    (tmp_path / "pyproject.toml").write_text("[tool.buildplan]\ninline_asset_limit = 512\n")
    monkeypatch.chdir(tmp_path)

    plan = synthesize([POPUP])

    root = Path(tmp_path).resolve()
    assert plan.output.path == (root / "build").as_posix()
    assert plan.resolution.module_scope == (root / "src").as_posix()
    assert plan.advisories == ()
    assert plan.pipeline.stage("inline-assets").loaders[0].options["limit"] == 512
    assert plan.entry["popup"][0] == "buildplan-runtime/polyfills.js"


def test_explicit_settings_and_paths_skip_project_files(tmp_path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.buildplan\n")

    def fail(*_args, **_kwargs):
        raise AssertionError("settings must not be resolved")

    monkeypatch.setattr("buildplan.config.resolve_settings", fail)
    monkeypatch.setattr("dotenv.load_dotenv", fail)

    plan = make_plan([POPUP])

    assert dict(plan.entry) == {"popup": (POLYFILLS, "popup/index.js")}


def test_omitted_settings_read_project_files(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.buildplan\n")

    with pytest.raises(ConfigurationError, match="Could not parse"):
        synthesize([POPUP], paths=make_paths())


def test_overlapping_additional_rules_fail_before_any_plan() -> None:
    loaders = (LoaderSpec("markdown-loader"),)
    rules = [
        PatternRule("md", (r"\.md$",), loaders=loaders),
        PatternRule("markdown", (r"\.(md|markdown)$",), loaders=loaders),
    ]

    with pytest.raises(ConfigurationError, match="claimed by more than one stage"):
        make_plan([POPUP], extra_rules=rules)


def test_additional_rule_without_loaders_fails_before_any_plan() -> None:
    with pytest.raises(ConfigurationError, match="has no loaders"):
        make_plan([POPUP], extra_rules=[PatternRule("svg", (r"\.svg$",))])
