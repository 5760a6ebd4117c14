"""Generation run.

Turns ``(package name, preset, root path)`` into files on disk:

1. resolve the preset into the active feature set,
2. verify that the generator registry exactly covers the schema,
3. select the schema nodes enabled by the active features,
4. run every selected file's generator concurrently, cancelling the rest
   as soon as one fails, and
5. write the results only once every generator has succeeded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable, Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from scaffold.errors import RegistryIncompleteError
from scaffold.features import FeatureConfig, resolve_features
from scaffold.generators.registry import GENERATORS, build_registry, invoke_generator
from scaffold.schema.repo_schema import REPO_SCHEMA
from scaffold.schema.types import (
    DirectoryMetadata,
    Feature,
    FileMetadata,
    Generator,
    GeneratorContext,
    GeneratorFn,
    SchemaNode,
)
from scaffold.schema.walker import ensure_registry_complete, iter_active_nodes, walk_schema

GITKEEP = ".gitkeep"


class SkippedPath(BaseModel):
    path: str
    reason: str


class GenerationPlan(BaseModel):
    """Which schema entries a run would create, in schema order."""

    features: list[Feature] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    skipped: list[SkippedPath] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Outcome of :func:`generate_package`."""

    package_path: Path
    features: list[Feature] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    files: dict[str, str] = Field(default_factory=dict, description="path -> generated content")
    written: list[str] = Field(default_factory=list)
    skipped: list[SkippedPath] = Field(default_factory=list)


def create_context(
    name: str,
    preset: str,
    root_path: str | Path,
    *,
    scope: str = "@mark1russell7",
    feature_config: FeatureConfig | None = None,
) -> GeneratorContext:
    """Build the ``GeneratorContext`` for one run; *root_path* is the package directory."""
    return GeneratorContext(
        package_name=name,
        full_package_name=f"{scope}/{name}" if scope else name,
        features=resolve_features(preset, feature_config),
        preset=preset,
        root_path=Path(root_path),
    )


def _sorted_features(features: Iterable[Feature]) -> list[Feature]:
    return sorted(features, key=lambda f: f.value)


def plan_package(
    schema: SchemaNode,
    features: Iterable[Feature],
    skip: Iterable[Generator] = (),
) -> GenerationPlan:
    """Select the directories and files enabled by *features*.

    File nodes whose backend kind is listed in *skip* are reported as
    skipped; they are produced by an external tool instead.
    """
    active_features = frozenset(features)
    skip_kinds = frozenset(skip)
    active = {path for path, _node in iter_active_nodes(schema, active_features)}
    plan = GenerationPlan(features=_sorted_features(active_features))

    def visit(path: str, meta: FileMetadata | DirectoryMetadata, _node: SchemaNode) -> None:
        if not path:
            return
        if path not in active:
            if meta.feature is not None and meta.feature not in active_features:
                reason = f"feature {meta.feature.value} not active"
            else:
                reason = "parent directory not active"
            plan.skipped.append(SkippedPath(path=path, reason=reason))
        elif isinstance(meta, DirectoryMetadata):
            plan.directories.append(path)
        elif meta.generator in skip_kinds:
            plan.skipped.append(
                SkippedPath(path=path, reason=f"{meta.generator.value} files are generated externally")
            )
        else:
            plan.files.append(path)

    walk_schema(schema, "", visit)
    return plan


async def generate_package(
    name: str,
    preset: str,
    root_path: str | Path,
    *,
    schema: SchemaNode = REPO_SCHEMA,
    registry: Mapping[str, GeneratorFn] | None = None,
    feature_config: FeatureConfig | None = None,
    scope: str = "@mark1russell7",
    skip: Iterable[Generator] = (),
    write: bool = True,
    overwrite: bool = False,
) -> GenerationResult:
    """Generate the package *name* into *root_path*.

    Raises:
        RegistryIncompleteError: If the registry does not exactly cover
            *schema*.  Checked before anything is generated.
        GeneratorError: If any file's generator fails; nothing is written.
    """
    if registry is None:
        registry = GENERATORS if schema is REPO_SCHEMA else build_registry(schema)
    ensure_registry_complete(schema, registry)

    context = create_context(
        name, preset, root_path, scope=scope, feature_config=feature_config
    )
    plan = plan_package(schema, context.features, skip)
    package_path = context.root_path

    generators = []
    for path in plan.files:
        fn = registry.get(path)
        if fn is None:
            raise RegistryIncompleteError([path], [])
        generators.append(invoke_generator(fn, path, context))

    contents = await _gather_or_cancel(generators)

    result = GenerationResult(
        package_path=package_path,
        features=plan.features,
        directories=list(plan.directories),
        files=dict(zip(plan.files, contents)),
        skipped=list(plan.skipped),
    )

    if write:
        await asyncio.to_thread(_write_result, result, overwrite)
    return result


async def _gather_or_cancel(coros: list[Awaitable[str]]) -> list[str]:
    """Await *coros* concurrently; the first failure cancels the others."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _write_result(result: GenerationResult, overwrite: bool) -> None:
    """Write generated files and create directories (``.gitkeep`` when empty)."""
    root = result.package_path
    root.mkdir(parents=True, exist_ok=True)

    for path, content in result.files.items():
        target = root / path
        if target.exists() and not overwrite:
            result.skipped.append(SkippedPath(path=path, reason="already exists"))
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        result.written.append(path)

    for path in result.directories:
        directory = root / path
        directory.mkdir(parents=True, exist_ok=True)
        if not any(directory.iterdir()):
            (directory / GITKEEP).write_text("", encoding="utf-8")
