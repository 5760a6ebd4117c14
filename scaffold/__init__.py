"""Schema-driven package scaffolding.

A declarative schema describes the shape of an ecosystem package, a feature
graph expands presets into active features, and a validated registry maps
every schema file to the generator producing it.

Quick usage::

    from scaffold import generate_package

    result = await generate_package("my-lib", "lib", "/tmp/my-lib")
"""

from scaffold.errors import (
    ConfigError,
    GeneratorError,
    ManifestError,
    RegistryIncompleteError,
    ScaffoldError,
    ToolError,
    UnknownGeneratorError,
    WorkflowError,
)
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
)
from scaffold.generation import create_context, generate_package, plan_package
from scaffold.generators import GENERATORS, get_generator
from scaffold.schema import (
    REPO_SCHEMA,
    Feature,
    FSType,
    Generator,
    GeneratorContext,
    SchemaNode,
    get_directory_paths,
    get_file_paths,
    validate_registry,
    walk_schema,
)

__all__ = [
    "ConfigError",
    "DEFAULT_FEATURE_CONFIG",
    "FSType",
    "Feature",
    "FeatureConfig",
    "FeatureResolver",
    "FeatureSpec",
    "GENERATORS",
    "Generator",
    "GeneratorContext",
    "GeneratorError",
    "ManifestError",
    "REPO_SCHEMA",
    "RegistryIncompleteError",
    "SchemaNode",
    "ScaffoldError",
    "ToolError",
    "UnknownGeneratorError",
    "WorkflowError",
    "create_context",
    "generate_package",
    "get_directory_paths",
    "get_feature_config",
    "get_file_paths",
    "get_generator",
    "get_preset_features",
    "get_presets",
    "is_feature_active",
    "load_feature_config",
    "plan_package",
    "reset_feature_config",
    "resolve_features",
    "set_feature_config",
    "validate_registry",
    "walk_schema",
]
