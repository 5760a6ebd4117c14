"""Scaffolder configuration.

Centralised, typed configuration for the workflows.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from scaffold.errors import ConfigError
from scaffold.features import FeatureConfig, get_feature_config, load_feature_config
from scaffold.utils import resolve_root


class ScaffoldConfig(BaseModel):
    """Global scaffolder configuration.

    Created once by the CLI (or by a caller embedding the workflows) and
    passed to ``LibNew`` / ``LibRefresh``.
    """

    scope: str = Field(default="@mark1russell7", description="npm scope of generated packages")
    github_owner: str = Field(default="mark1russell7")
    root_path: str = Field(default="~/git", description="Directory holding all ecosystem packages")
    default_preset: str = Field(default="lib")
    features_path: Path | None = Field(
        default=None, description="Optional features.json/.yaml replacing the built-in graph"
    )
    manifest_relpath: str = Field(default="ecosystem/ecosystem.manifest.json")
    command_timeout: int = Field(default=120, ge=1)
    install_timeout: int = Field(default=300, ge=1)
    build_timeout: int = Field(default=120, ge=1)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def resolved_root(self) -> Path:
        """``root_path`` with ``~`` expanded."""
        return resolve_root(self.root_path)

    @property
    def manifest_path(self) -> Path:
        """Path to the shared ecosystem manifest."""
        return self.resolved_root / self.manifest_relpath

    def package_path(self, name: str) -> Path:
        return self.resolved_root / name

    def full_package_name(self, name: str) -> str:
        return f"{self.scope}/{name}" if self.scope else name

    def repo_slug(self, name: str) -> str:
        return f"{self.github_owner}/{name}"

    def feature_config(self) -> FeatureConfig:
        """The feature graph to resolve presets against.

        Raises:
            ConfigError: If ``features_path`` cannot be read or parsed.
        """
        if self.features_path is None:
            return get_feature_config()
        try:
            return load_feature_config(self.features_path)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigError(str(self.features_path), str(exc)) from exc

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON.

        Raises:
            ConfigError: If the file is missing, unreadable or holds invalid values.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
            return cls.model_validate_json(raw)
        except (OSError, ValueError) as exc:
            raise ConfigError(str(path), str(exc)) from exc

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            SCAFFOLD_SCOPE, SCAFFOLD_GITHUB_OWNER, SCAFFOLD_ROOT,
            SCAFFOLD_PRESET, SCAFFOLD_FEATURES, SCAFFOLD_MANIFEST,
            SCAFFOLD_COMMAND_TIMEOUT, SCAFFOLD_INSTALL_TIMEOUT,
            SCAFFOLD_BUILD_TIMEOUT.

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        kwargs: dict[str, Any] = {}
        env_map = {
            "SCAFFOLD_SCOPE": "scope",
            "SCAFFOLD_GITHUB_OWNER": "github_owner",
            "SCAFFOLD_ROOT": "root_path",
            "SCAFFOLD_PRESET": "default_preset",
            "SCAFFOLD_MANIFEST": "manifest_relpath",
        }
        for var, field_name in env_map.items():
            if os.environ.get(var):
                kwargs[field_name] = os.environ[var]

        if os.environ.get("SCAFFOLD_FEATURES"):
            kwargs["features_path"] = Path(os.environ["SCAFFOLD_FEATURES"])

        for var, field_name in (
            ("SCAFFOLD_COMMAND_TIMEOUT", "command_timeout"),
            ("SCAFFOLD_INSTALL_TIMEOUT", "install_timeout"),
            ("SCAFFOLD_BUILD_TIMEOUT", "build_timeout"),
        ):
            if os.environ.get(var):
                kwargs[field_name] = os.environ[var]

        try:
            return cls(**kwargs)
        except ValueError as exc:
            raise ConfigError("environment", str(exc)) from exc
