"""Schema types.

Core types of the schema-driven scaffolding system.  A schema is a tree of
``SchemaNode`` values; each node carries typed metadata describing whether it
is a file or a directory, which feature gates it and, for files, which
generator backend produces its content.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FSType(str, Enum):
    """Filesystem node types."""

    FILE = "file"
    DIRECTORY = "directory"


class Generator(str, Enum):
    """Available generator backends."""

    CUE = "cue"
    """CUE evaluation (package.json, tsconfig.json, .gitignore)."""
    TS_MORPH = "ts-morph"
    """In-memory TypeScript source synthesis."""
    TEMPLATE = "template"
    """Jinja2 templates."""
    NONE = "none"
    """No generation needed (manual files)."""


class Feature(str, Enum):
    """Features that control which schema entries are active."""

    CORE = "core"
    NPM = "npm"
    TS = "ts"
    VITEST = "vitest"
    REACT = "react"
    NODE = "node"
    VITE = "vite"
    CUE = "cue"


# ---------------------------------------------------------------------------
# Generator sources (one variant per backend)
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class CueSource(_Frozen):
    """Content comes from evaluating a CUE expression."""

    kind: Literal["cue"] = "cue"
    expr: str = Field(..., min_length=1)


class MorphSource(_Frozen):
    """Content comes from a named in-memory synthesis function."""

    kind: Literal["ts-morph"] = "ts-morph"
    function: str = Field(..., min_length=1)


class TemplateSource(_Frozen):
    """Content comes from a named template."""

    kind: Literal["template"] = "template"
    template: str = Field(..., min_length=1)


class NoSource(_Frozen):
    kind: Literal["none"] = "none"


GeneratorSource = Annotated[
    Union[CueSource, MorphSource, TemplateSource, NoSource],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Node metadata
# ---------------------------------------------------------------------------


class FileMetadata(_Frozen):
    """Metadata attached to file entries."""

    type: Literal[FSType.FILE] = FSType.FILE
    source: GeneratorSource = Field(default_factory=NoSource)
    feature: Feature | None = None

    @property
    def generator(self) -> Generator:
        """The backend kind selected by :attr:`source`."""
        return Generator(self.source.kind)


class DirectoryMetadata(_Frozen):
    """Metadata attached to directory entries."""

    type: Literal[FSType.DIRECTORY] = FSType.DIRECTORY
    name: str | None = None
    """Display name; the root uses the ``{{packageName}}`` placeholder."""
    feature: Feature | None = None
    always: bool = False
    """Create this directory regardless of features."""


NodeMetadata = Annotated[
    Union[FileMetadata, DirectoryMetadata],
    Field(discriminator="type"),
]


class SchemaNode(_Frozen):
    """A schema node: typed metadata plus an ordered mapping of named children."""

    meta: NodeMetadata
    children: dict[str, SchemaNode] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _files_have_no_children(self) -> SchemaNode:
        if self.meta.type == FSType.FILE and self.children:
            raise ValueError("file nodes cannot have children")
        for key in self.children:
            if not key or "/" in key:
                raise ValueError(f"invalid child name: {key!r}")
        return self

    @property
    def is_file(self) -> bool:
        return self.meta.type == FSType.FILE

    @property
    def is_directory(self) -> bool:
        return self.meta.type == FSType.DIRECTORY

    def items(self) -> Iterator[tuple[str, SchemaNode]]:
        return iter(self.children.items())


def file_node(
    source: CueSource | MorphSource | TemplateSource | NoSource | None = None,
    feature: Feature | None = None,
) -> SchemaNode:
    """Build a file node."""
    return SchemaNode(meta=FileMetadata(source=source or NoSource(), feature=feature))


def directory_node(
    children: Mapping[str, SchemaNode] | None = None,
    *,
    name: str | None = None,
    feature: Feature | None = None,
    always: bool = False,
) -> SchemaNode:
    """Build a directory node; *children* keep their insertion order."""
    return SchemaNode(
        meta=DirectoryMetadata(name=name, feature=feature, always=always),
        children=dict(children or {}),
    )


# ---------------------------------------------------------------------------
# Generation context
# ---------------------------------------------------------------------------


class GeneratorContext(_Frozen):
    """Context passed to every generator function for one generation run."""

    package_name: str = Field(..., description="Package name (e.g. 'scaffold')")
    full_package_name: str = Field(
        ..., description="Scoped package name (e.g. '@mark1russell7/scaffold')"
    )
    features: frozenset[Feature] = Field(default_factory=frozenset)
    preset: str = Field(..., description="Preset name (e.g. 'lib')")
    root_path: Path = Field(..., description="Directory the package is generated into")


GeneratorFn = Callable[[str, GeneratorContext], Union[str, Awaitable[str]]]
