"""Repository schema.

The canonical definition of an ecosystem package's structure.  The nesting
mirrors the filesystem and is the single source of truth for which files and
directories a package has.  Adding a file here without a generator makes the
registry check in ``scaffold.generators.registry`` fail at import time.
"""

from __future__ import annotations

from scaffold.schema.types import (
    CueSource,
    Feature,
    MorphSource,
    TemplateSource,
    directory_node,
    file_node,
)

PACKAGE_NAME_PLACEHOLDER = "{{packageName}}"

REPO_SCHEMA = directory_node(
    {
        "package.json": file_node(CueSource(expr="npm/package:output"), Feature.NPM),
        "tsconfig.json": file_node(CueSource(expr="ts/config:output"), Feature.TS),
        ".gitignore": file_node(CueSource(expr="git/ignore:output"), Feature.CORE),
        "dependencies.json": file_node(
            TemplateSource(template="dependencies.json.j2"), Feature.CUE
        ),
        "vitest.config.ts": file_node(
            MorphSource(function="generate_vitest_config"), Feature.VITEST
        ),
        "src": directory_node(
            {
                "index.ts": file_node(MorphSource(function="generate_index_ts"), Feature.TS),
            },
            always=True,
        ),
    },
    name=PACKAGE_NAME_PLACEHOLDER,
)
