"""Generator registry.

Maps every file path of a schema to the function that produces its content.
A registry is only ever handed out after :func:`ensure_registry_complete`
has confirmed that its keys are exactly the schema's file paths, so adding
a file to ``REPO_SCHEMA`` without a generator fails as soon as this module
is imported.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping

from scaffold.errors import GeneratorError, ScaffoldError
from scaffold.generators.cue import cue_generator
from scaffold.generators.morph import morph_generator
from scaffold.generators.template import template_generator
from scaffold.schema.repo_schema import REPO_SCHEMA
from scaffold.schema.types import (
    CueSource,
    FileMetadata,
    GeneratorContext,
    GeneratorFn,
    MorphSource,
    NoSource,
    SchemaNode,
    TemplateSource,
)
from scaffold.schema.walker import ensure_registry_complete, walk_schema


class GeneratorRegistry(Mapping[str, GeneratorFn]):
    """Read-only, validated mapping of schema file path to generator function."""

    def __init__(self, schema: SchemaNode, generators: Mapping[str, GeneratorFn]) -> None:
        ensure_registry_complete(schema, generators)
        self.schema = schema
        self._generators = dict(generators)

    def __getitem__(self, path: str) -> GeneratorFn:
        return self._generators[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)

    def get_generator(self, path: str) -> GeneratorFn | None:
        """Return the generator for *path*, or ``None`` when the path is unknown."""
        return self._generators.get(path)


def empty_generator(path: str, context: GeneratorContext) -> str:
    """Generator for files the schema declares but nothing fills in."""
    return ""


def generator_for(meta: FileMetadata) -> GeneratorFn:
    """Select the backend for a file node from its generator source.

    Raises:
        UnknownGeneratorError: If the node names a missing synthesis function
            or template.
    """
    source = meta.source
    if isinstance(source, CueSource):
        return cue_generator(source.expr)
    if isinstance(source, MorphSource):
        return morph_generator(source.function)
    if isinstance(source, TemplateSource):
        return template_generator(source.template)
    if isinstance(source, NoSource):
        return empty_generator
    raise ScaffoldError(f"Unsupported generator source: {source!r}")


def create_generator_registry(
    schema: SchemaNode, generators: Mapping[str, GeneratorFn]
) -> GeneratorRegistry:
    """Wrap an explicit path -> generator mapping, rejecting incomplete ones.

    Raises:
        RegistryIncompleteError: If any schema file lacks a generator or any
            generator has no schema file.
    """
    return GeneratorRegistry(schema, generators)


def build_registry(
    schema: SchemaNode, overrides: Mapping[str, GeneratorFn] | None = None
) -> GeneratorRegistry:
    """Derive a registry from the generator source declared on each file node.

    *overrides* replaces the derived generator for individual paths; an
    override for a path the schema does not declare is rejected as extra.
    """
    generators: dict[str, GeneratorFn] = {}

    def collect(path: str, meta, _node: SchemaNode) -> None:
        if isinstance(meta, FileMetadata) and path:
            if overrides and path in overrides:
                return
            generators[path] = generator_for(meta)

    walk_schema(schema, "", collect)
    if overrides:
        generators.update(overrides)
    return GeneratorRegistry(schema, generators)


async def invoke_generator(fn: GeneratorFn, path: str, context: GeneratorContext) -> str:
    """Run *fn* for *path*, awaiting it if needed.

    Any failure is re-raised as ``GeneratorError`` naming the path; a
    non-string result is treated as a failure too.
    """
    try:
        result = fn(path, context)
        if inspect.isawaitable(result):
            result = await result
    except GeneratorError:
        raise
    except ScaffoldError as exc:
        raise GeneratorError(path, str(exc)) from exc
    except Exception as exc:
        raise GeneratorError(path, f"{type(exc).__name__}: {exc}") from exc

    if not isinstance(result, str):
        raise GeneratorError(path, f"generator returned {type(result).__name__}, expected str")
    return result


GENERATORS = build_registry(REPO_SCHEMA)


def get_generator(path: str) -> GeneratorFn | None:
    """Return the generator registered for *path* in ``REPO_SCHEMA``."""
    return GENERATORS.get_generator(path)
