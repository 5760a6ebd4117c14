"""Schema traversal and registry validation.

These functions are the only sanctioned way to interrogate a schema tree:
they own the path construction rules (POSIX ``/`` joins, root excluded from
the path listings) that the generator registry keys rely on.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Union

from pydantic import BaseModel, Field

from scaffold.errors import RegistryIncompleteError
from scaffold.schema.types import (
    DirectoryMetadata,
    Feature,
    FileMetadata,
    FSType,
    SchemaNode,
)

Visitor = Callable[[str, Union[FileMetadata, DirectoryMetadata], SchemaNode], None]


def join_path(parent: str, key: str) -> str:
    """Join a child key onto a schema path."""
    return f"{parent}/{key}" if parent else key


def walk_schema(node: SchemaNode, current_path: str, visitor: Visitor) -> None:
    """Call *visitor* for *node* and then for every descendant, parent first.

    The root receives *current_path* unchanged; children receive the
    slash-joined chain of keys.  Children are visited in insertion order.
    """
    visitor(current_path, node.meta, node)
    for key, child in node.items():
        walk_schema(child, join_path(current_path, key), visitor)


def _paths_of_type(schema: SchemaNode, fs_type: FSType) -> list[str]:
    paths: list[str] = []

    def collect(path: str, meta: FileMetadata | DirectoryMetadata, _node: SchemaNode) -> None:
        if meta.type == fs_type and path:
            paths.append(path)

    walk_schema(schema, "", collect)
    return paths


def get_file_paths(schema: SchemaNode) -> list[str]:
    """Return all file paths declared by *schema*, in walk order."""
    return _paths_of_type(schema, FSType.FILE)


def get_directory_paths(schema: SchemaNode) -> list[str]:
    """Return all directory paths declared by *schema*, root excluded."""
    return _paths_of_type(schema, FSType.DIRECTORY)


def _gate_open(feature: Feature | None, active: frozenset[Feature]) -> bool:
    return feature is None or feature in active


def iter_active_nodes(
    schema: SchemaNode, features: Iterable[Feature]
) -> Iterator[tuple[str, SchemaNode]]:
    """Yield ``(path, node)`` for every node enabled by *features*.

    A directory whose feature is inactive and that is not marked ``always``
    is dropped together with everything below it.  The root itself is not
    yielded.
    """
    active = frozenset(features)

    def visit(node: SchemaNode, path: str) -> Iterator[tuple[str, SchemaNode]]:
        for key, child in node.items():
            child_path = join_path(path, key)
            meta = child.meta
            if isinstance(meta, DirectoryMetadata):
                if not meta.always and not _gate_open(meta.feature, active):
                    continue
                yield child_path, child
                yield from visit(child, child_path)
            elif _gate_open(meta.feature, active):
                yield child_path, child

    yield from visit(schema, "")


# ---------------------------------------------------------------------------
# Registry validation
# ---------------------------------------------------------------------------


class RegistryValidation(BaseModel):
    """Outcome of comparing a generator registry with a schema."""

    valid: bool
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)


def validate_registry(schema: SchemaNode, registry: Mapping[str, Any]) -> RegistryValidation:
    """Check that *registry* has exactly one entry per schema file path.

    ``missing`` keeps schema order and ``extra`` keeps registry order.
    """
    schema_paths = get_file_paths(schema)
    schema_set = set(schema_paths)

    missing = [p for p in schema_paths if p not in registry]
    extra = [p for p in registry if p not in schema_set]

    return RegistryValidation(
        valid=not missing and not extra,
        missing=missing,
        extra=extra,
    )


def ensure_registry_complete(schema: SchemaNode, registry: Mapping[str, Any]) -> None:
    """Raise ``RegistryIncompleteError`` unless *registry* exactly covers *schema*."""
    result = validate_registry(schema, registry)
    if not result.valid:
        raise RegistryIncompleteError(result.missing, result.extra)
