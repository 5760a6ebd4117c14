"""Tests for the feature system (scaffold.features).

Covers:
- Preset resolution for the built-in presets
- Transitive dependencies, cycles and unmapped names
- Unknown presets
- Replacing the process-wide configuration
- Loading configurations from JSON and YAML
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from scaffold.features import (
    DEFAULT_FEATURE_CONFIG,
    FeatureConfig,
    FeatureResolver,
    FeatureSpec,
    get_feature_config,
    get_preset_features,
    get_presets,
    is_feature_active,
    load_feature_config,
    reset_feature_config,
    resolve_features,
    set_feature_config,
    to_feature,
)
from scaffold.schema.types import Feature

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveFeatures:
    def test_react_lib_preset(self):
        features = resolve_features("react-lib")
        assert features == {
            Feature.CORE,
            Feature.NPM,
            Feature.TS,
            Feature.REACT,
            Feature.CUE,
            Feature.VITEST,
        }
        assert len(features) == 6

    def test_lib_preset(self):
        assert resolve_features("lib") == {
            Feature.CORE,
            Feature.NPM,
            Feature.TS,
            Feature.CUE,
            Feature.VITEST,
        }

    def test_app_preset_collapses_vite_names(self):
        features = resolve_features("app")
        assert Feature.VITE in features
        assert Feature.REACT in features
        assert Feature.NODE not in features
        assert len(features) == 7

    def test_core_always_present(self):
        for preset in get_presets():
            assert Feature.CORE in resolve_features(preset)

    def test_unknown_preset_gives_core_only(self):
        assert resolve_features("does-not-exist") == {Feature.CORE}

    def test_returns_frozenset(self):
        assert isinstance(resolve_features("lib"), frozenset)

    def test_explicit_config_overrides_active(self):
        config = FeatureConfig(
            features={"ts": FeatureSpec(dependencies=[])},
            presets={"bare": ["ts"]},
        )
        assert resolve_features("bare", config) == {Feature.CORE, Feature.TS}
        # The process-wide config is untouched
        assert resolve_features("bare") == {Feature.CORE}


class TestFeatureResolver:
    def test_cycle_terminates(self):
        config = FeatureConfig(
            features={
                "ts": FeatureSpec(dependencies=["npm"]),
                "npm": FeatureSpec(dependencies=["ts"]),
            },
            presets={"loop": ["ts"]},
        )
        assert FeatureResolver(config).resolve("loop") == {
            Feature.CORE,
            Feature.TS,
            Feature.NPM,
        }

    def test_unmapped_name_still_expands_dependencies(self):
        config = FeatureConfig(
            features={"eslint": FeatureSpec(dependencies=["ts"])},
            presets={"lint": ["eslint"]},
        )
        assert FeatureResolver(config).resolve("lint") == {Feature.CORE, Feature.TS}

    def test_undeclared_name_has_no_dependencies(self):
        config = FeatureConfig(presets={"solo": ["vitest"]})
        assert FeatureResolver(config).resolve("solo") == {Feature.CORE, Feature.VITEST}

    def test_alias_name_expands_its_own_dependencies(self):
        # vite-react and vite both map to Feature.VITE; vite is still walked
        config = FeatureConfig(
            features={
                "vite-react": FeatureSpec(dependencies=["vite"]),
                "vite": FeatureSpec(dependencies=["node"]),
            },
            presets={"app": ["vite-react"]},
        )
        assert FeatureResolver(config).resolve("app") == {
            Feature.CORE,
            Feature.VITE,
            Feature.NODE,
        }

    def test_alias_requested_after_mapped_feature(self):
        config = FeatureConfig(
            features={
                "node": FeatureSpec(dependencies=["ts"]),
                "node-cjs": FeatureSpec(dependencies=["react"]),
            },
            presets={"server": ["node", "node-cjs"]},
        )
        assert FeatureResolver(config).resolve("server") == {
            Feature.CORE,
            Feature.NODE,
            Feature.TS,
            Feature.REACT,
        }

    @pytest.mark.parametrize("preset", ["lib", "react-lib", "app", "nope"])
    def test_resolution_is_repeatable(self, preset):
        first = resolve_features(preset)
        second = resolve_features(preset)
        assert first == second
        assert FeatureResolver().resolve(preset) == first

    def test_shared_dependency_expanded_once(self):
        resolver = FeatureResolver()
        # vite-react depends on vite and react, both of which depend on ts
        assert Feature.TS in resolver.resolve("app")

    def test_default_config(self):
        assert FeatureResolver().config is DEFAULT_FEATURE_CONFIG

    def test_presets(self):
        assert FeatureResolver().presets() == ["lib", "react-lib", "app"]

    def test_preset_features_is_a_copy(self):
        resolver = FeatureResolver()
        names = resolver.preset_features("lib")
        names.append("react")
        assert resolver.preset_features("lib") == ["ts", "cue", "vitest"]


class TestPresetQueries:
    def test_get_presets(self):
        assert set(get_presets()) == {"lib", "react-lib", "app"}

    def test_get_preset_features(self):
        assert get_preset_features("react-lib") == ["react", "cue", "vitest"]

    def test_get_preset_features_unknown(self):
        assert get_preset_features("nope") == []


class TestFeatureNames:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("git", Feature.CORE),
            ("core", Feature.CORE),
            ("node-cjs", Feature.NODE),
            ("vite-react", Feature.VITE),
            ("vitest", Feature.VITEST),
            ("eslint", None),
        ],
    )
    def test_to_feature(self, name, expected):
        assert to_feature(name) is expected

    def test_is_feature_active(self):
        active = {Feature.CORE, Feature.TS}
        assert is_feature_active(None, active) is True
        assert is_feature_active(Feature.TS, active) is True
        assert is_feature_active(Feature.REACT, active) is False

    def test_is_feature_active_ungated_with_empty_set(self):
        assert is_feature_active(None, frozenset()) is True
        assert is_feature_active(Feature.CORE, frozenset()) is False


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestFeatureConfigState:
    def test_set_feature_config_from_mapping(self):
        set_feature_config(
            {
                "features": {"react": {"dependencies": []}},
                "presets": {"ui": ["react"]},
            }
        )
        assert get_presets() == ["ui"]
        assert resolve_features("ui") == {Feature.CORE, Feature.REACT}
        assert resolve_features("lib") == {Feature.CORE}

    def test_null_feature_declaration_has_no_dependencies(self):
        set_feature_config({"features": {"ts": None}, "presets": {"p": ["ts"]}})
        assert resolve_features("p") == {Feature.CORE, Feature.TS}

    @pytest.mark.parametrize(
        "declaration",
        [
            {"dependencies": "npm"},
            {"dependencies": None},
            {"dependencies": ["npm", 3, None]},
            "npm",
            ["npm"],
        ],
    )
    def test_malformed_dependencies_degrade(self, declaration):
        set_feature_config({"features": {"ts": declaration}, "presets": {"p": ["ts"]}})
        active = resolve_features("p")
        assert Feature.TS in active
        assert active <= {Feature.CORE, Feature.TS, Feature.NPM}

    def test_malformed_presets_degrade(self):
        set_feature_config({"features": [], "presets": {"p": "ts", "q": ["react", 7], "r": None}})
        assert get_presets() == ["p", "q", "r"]
        assert resolve_features("p") == {Feature.CORE}
        assert resolve_features("q") == {Feature.CORE, Feature.REACT}
        assert get_preset_features("r") == []

    def test_non_mapping_config_is_empty(self):
        set_feature_config(["lib"])
        assert get_presets() == []
        assert resolve_features("lib") == {Feature.CORE}

    def test_reset_feature_config(self):
        set_feature_config(FeatureConfig())
        reset_feature_config()
        assert get_feature_config() is DEFAULT_FEATURE_CONFIG

    def test_dependencies_of(self):
        assert DEFAULT_FEATURE_CONFIG.dependencies_of("vite-react") == ["vite", "react"]
        assert DEFAULT_FEATURE_CONFIG.dependencies_of("unknown") == []


class TestLoadFeatureConfig:
    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "features.json"
        path.write_text(
            json.dumps(
                {
                    "features": {"ts": {"dependencies": ["npm"]}, "npm": {}},
                    "presets": {"ts-only": ["ts"]},
                }
            ),
            encoding="utf-8",
        )
        config = load_feature_config(path)
        assert config.dependencies_of("ts") == ["npm"]
        assert config.dependencies_of("npm") == []
        assert FeatureResolver(config).resolve("ts-only") == {
            Feature.CORE,
            Feature.TS,
            Feature.NPM,
        }

    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "features.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "features": {"cue": {"dependencies": ["npm"]}},
                    "presets": {"cue-only": ["cue"]},
                }
            ),
            encoding="utf-8",
        )
        config = load_feature_config(path)
        assert config.presets == {"cue-only": ["cue"]}

    def test_load_empty_yaml(self, tmp_path: Path):
        path = tmp_path / "features.yml"
        path.write_text("", encoding="utf-8")
        config = load_feature_config(path)
        assert config.features == {}
        assert config.presets == {}

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_feature_config(tmp_path / "missing.json")
