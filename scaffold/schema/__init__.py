"""Schema model, the canonical repository schema and its traversal helpers."""

from scaffold.schema.repo_schema import PACKAGE_NAME_PLACEHOLDER, REPO_SCHEMA
from scaffold.schema.types import (
    CueSource,
    DirectoryMetadata,
    Feature,
    FileMetadata,
    FSType,
    Generator,
    GeneratorContext,
    GeneratorFn,
    MorphSource,
    NoSource,
    SchemaNode,
    TemplateSource,
    directory_node,
    file_node,
)
from scaffold.schema.walker import (
    RegistryValidation,
    ensure_registry_complete,
    get_directory_paths,
    get_file_paths,
    iter_active_nodes,
    validate_registry,
    walk_schema,
)

__all__ = [
    "CueSource",
    "DirectoryMetadata",
    "FSType",
    "Feature",
    "FileMetadata",
    "Generator",
    "GeneratorContext",
    "GeneratorFn",
    "MorphSource",
    "NoSource",
    "PACKAGE_NAME_PLACEHOLDER",
    "REPO_SCHEMA",
    "RegistryValidation",
    "SchemaNode",
    "TemplateSource",
    "directory_node",
    "ensure_registry_complete",
    "file_node",
    "get_directory_paths",
    "get_file_paths",
    "iter_active_nodes",
    "validate_registry",
    "walk_schema",
]
