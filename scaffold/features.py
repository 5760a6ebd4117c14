"""Feature system.

Resolves presets into the set of active features, following dependency
declarations transitively.  The dependency graph and the presets come from a
``FeatureConfig``; the built-in default mirrors the ``features.json`` shipped
with the cue-config tool and can be replaced wholesale (for example with the
file that tool produces) before any resolution happens.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from scaffold.schema.types import Feature


def _names(value: Any) -> list[str]:
    """Keep the string entries of a list; anything else reads as empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class FeatureSpec(BaseModel):
    """Declaration of a single feature in the dependency graph.

    Malformed declarations (``null``, a bare string, a non-list
    ``dependencies``) are read as "no dependencies" rather than rejected.
    """

    dependencies: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _lenient_layout(cls, data: Any) -> Any:
        if isinstance(data, FeatureSpec):
            return data
        if not isinstance(data, Mapping):
            return {}
        return {**data, "dependencies": _names(data.get("dependencies"))}


class FeatureConfig(BaseModel):
    """Feature dependency graph plus named presets.

    Matches the ``{features: {name: {dependencies: [...]}}, presets: {name:
    [...]}}`` layout of ``features.json``.  The layout is not enforced: parts
    that do not fit it are dropped, so a damaged file only shrinks the
    resolved feature sets.
    """

    features: dict[str, FeatureSpec] = Field(default_factory=dict)
    presets: dict[str, list[str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lenient_layout(cls, data: Any) -> Any:
        if isinstance(data, FeatureConfig):
            return data
        if not isinstance(data, Mapping):
            return {}
        features = data.get("features")
        presets = data.get("presets")
        return {
            **data,
            "features": (
                {str(k): v for k, v in features.items()} if isinstance(features, Mapping) else {}
            ),
            "presets": (
                {str(k): _names(v) for k, v in presets.items()} if isinstance(presets, Mapping) else {}
            ),
        }

    def dependencies_of(self, name: str) -> list[str]:
        """Dependency names declared for *name* (empty when undeclared)."""
        spec = self.features.get(name)
        return list(spec.dependencies) if spec else []


DEFAULT_FEATURE_CONFIG = FeatureConfig(
    features={
        "git": FeatureSpec(dependencies=[]),
        "npm": FeatureSpec(dependencies=["git"]),
        "ts": FeatureSpec(dependencies=["npm"]),
        "react": FeatureSpec(dependencies=["ts"]),
        "node": FeatureSpec(dependencies=["ts"]),
        "node-cjs": FeatureSpec(dependencies=["ts"]),
        "vite": FeatureSpec(dependencies=["ts"]),
        "vite-react": FeatureSpec(dependencies=["vite", "react"]),
        "cue": FeatureSpec(dependencies=["npm"]),
        "vitest": FeatureSpec(dependencies=["ts"]),
    },
    presets={
        "lib": ["ts", "cue", "vitest"],
        "react-lib": ["react", "cue", "vitest"],
        "app": ["vite-react", "cue", "vitest"],
    },
)

# Several config names collapse onto one schema feature; git is part of core.
FEATURE_NAMES: dict[str, Feature] = {
    "core": Feature.CORE,
    "git": Feature.CORE,
    "npm": Feature.NPM,
    "ts": Feature.TS,
    "vitest": Feature.VITEST,
    "react": Feature.REACT,
    "node": Feature.NODE,
    "node-cjs": Feature.NODE,
    "vite": Feature.VITE,
    "vite-react": Feature.VITE,
    "cue": Feature.CUE,
}


def to_feature(name: str) -> Feature | None:
    """Map a config feature name to a ``Feature``; unknown names give ``None``."""
    return FEATURE_NAMES.get(name)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class FeatureResolver:
    """Resolves presets against an explicit ``FeatureConfig``.

    Construct one per loaded configuration and call :meth:`resolve` as often
    as needed; the resolver holds no state besides the config.
    """

    def __init__(self, config: FeatureConfig | None = None) -> None:
        self.config = config if config is not None else DEFAULT_FEATURE_CONFIG

    def resolve(self, preset: str) -> frozenset[Feature]:
        """Return every feature activated by *preset*, always including core.

        Each requested name is expanded once: its mapped feature (if any) is
        added and its declared dependencies are walked.  Names without a
        ``Feature`` mapping still contribute their dependencies.  Unknown
        presets resolve to core only.
        """
        active: set[Feature] = {Feature.CORE}
        expanded: set[str] = set()

        def add_with_deps(name: str) -> None:
            if name in expanded:
                return
            expanded.add(name)

            feature = to_feature(name)
            if feature is not None:
                active.add(feature)

            for dep in self.config.dependencies_of(name):
                add_with_deps(dep)

        for name in self.preset_features(preset):
            add_with_deps(name)

        return frozenset(active)

    def presets(self) -> list[str]:
        return list(self.config.presets)

    def preset_features(self, preset: str) -> list[str]:
        return list(self.config.presets.get(preset, []))


def is_feature_active(feature: Feature | None, active: Iterable[Feature]) -> bool:
    """Check whether *feature* is enabled; ``None`` means "always include"."""
    if feature is None:
        return True
    return feature in active


# ---------------------------------------------------------------------------
# Process-wide default configuration
# ---------------------------------------------------------------------------

_config: FeatureConfig = DEFAULT_FEATURE_CONFIG


def set_feature_config(config: FeatureConfig | Mapping[str, Any]) -> None:
    """Replace the active feature configuration.

    Meant for load time only (e.g. after reading the cue-config features
    file); never call it while a resolution is in flight.
    """
    global _config
    if not isinstance(config, FeatureConfig):
        config = FeatureConfig.model_validate(config)
    _config = config


def get_feature_config() -> FeatureConfig:
    """Return the active feature configuration."""
    return _config


def reset_feature_config() -> None:
    """Restore the built-in default configuration."""
    set_feature_config(DEFAULT_FEATURE_CONFIG)


def resolve_features(preset: str, config: FeatureConfig | None = None) -> frozenset[Feature]:
    """Resolve *preset* against *config*, or the active configuration when omitted."""
    return FeatureResolver(config if config is not None else _config).resolve(preset)


def get_presets(config: FeatureConfig | None = None) -> list[str]:
    """Return all available preset names."""
    return FeatureResolver(config if config is not None else _config).presets()


def get_preset_features(preset: str, config: FeatureConfig | None = None) -> list[str]:
    """Return the directly requested feature names of *preset*."""
    return FeatureResolver(config if config is not None else _config).preset_features(preset)


def load_feature_config(path: str | Path) -> FeatureConfig:
    """Load a ``FeatureConfig`` from a JSON or YAML file.

    Parts of the file that do not follow the expected layout are dropped.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If a JSON file cannot be parsed.
        yaml.YAMLError: If a YAML file cannot be parsed.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    if file_path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(raw) or {}
    else:
        data = json.loads(raw)
    return FeatureConfig.model_validate(data)
