"""CUE generator.

Wraps CUE evaluation for ``package.json``, ``tsconfig.json`` and
``.gitignore``, and delegates package initialisation to the ``cue-config``
tool.
"""

from __future__ import annotations

import json
from pathlib import Path

from scaffold.errors import GeneratorError
from scaffold.schema.types import GeneratorContext, GeneratorFn
from scaffold.utils import dump_json, require_success, run_command


def cue_eval_command(cue_expr: str, context: GeneratorContext) -> list[str]:
    """Build the ``cue eval`` argument list, injecting one flag per active feature."""
    cmd = ["cue", "eval", cue_expr]
    for feature in sorted(context.features, key=lambda f: f.value):
        cmd.extend(["--inject", f"feature_{feature.value}=true"])
    cmd.extend(["--out", "json"])
    return cmd


def cue_generator(cue_expr: str, timeout: int = 120) -> GeneratorFn:
    """Create a generator that evaluates *cue_expr* (e.g. ``"npm/package:output"``)."""

    async def generate(path: str, context: GeneratorContext) -> str:
        cmd = cue_eval_command(cue_expr, context)
        returncode, stdout, stderr = await run_command(
            cmd, cwd=context.root_path, timeout=timeout
        )
        if returncode != 0:
            raise GeneratorError(
                path, f"CUE evaluation failed for {cue_expr} (exit {returncode}): {stderr}"
            )
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise GeneratorError(path, f"CUE evaluation of {cue_expr} returned invalid JSON: {exc}") from exc
        return dump_json(data)

    generate.__name__ = f"cue_generator[{cue_expr}]"
    return generate


# ---------------------------------------------------------------------------
# cue-config delegation
# ---------------------------------------------------------------------------


async def run_cue_config_init(cwd: str | Path, preset: str, timeout: int = 120) -> str:
    """Run ``cue-config init``, which writes ``dependencies.json`` for *preset*."""
    return await require_success(
        ["npx", "cue-config", "init", "--preset", preset], cwd=cwd, timeout=timeout
    )


async def run_cue_config_generate(cwd: str | Path, timeout: int = 120) -> str:
    """Run ``cue-config generate`` (package.json, tsconfig.json, .gitignore)."""
    return await require_success(["npx", "cue-config", "generate"], cwd=cwd, timeout=timeout)


async def run_cue_config_validate(package_path: str | Path, timeout: int = 120) -> str:
    """Run ``cue-config validate-structure`` against *package_path*."""
    return await require_success(
        ["npx", "cue-config", "validate-structure", "--path", str(package_path)],
        cwd=package_path,
        timeout=timeout,
    )
