"""Shared pytest fixtures for the scaffolder test suite.

Provides reusable fixtures for:
- Generator contexts for the built-in presets
- A scaffolder config rooted in a temporary directory
- An ecosystem manifest file
- A recorder that stands in for every external command (git, gh, pnpm, cue)
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import ExitStack
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from scaffold.config import ScaffoldConfig
from scaffold.features import reset_feature_config
from scaffold.generation import create_context
from scaffold.schema.types import GeneratorContext


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _default_feature_config() -> Iterator[None]:
    """Every test starts and ends with the built-in feature graph."""
    reset_feature_config()
    yield
    reset_feature_config()


# ---------------------------------------------------------------------------
# Contexts & Config
# ---------------------------------------------------------------------------

@pytest.fixture
def lib_context(tmp_path: Path) -> GeneratorContext:
    """Generator context for ``my-lib`` with the ``lib`` preset."""
    return create_context("my-lib", "lib", tmp_path / "my-lib")


@pytest.fixture
def react_context(tmp_path: Path) -> GeneratorContext:
    """Generator context for ``my-ui`` with the ``react-lib`` preset."""
    return create_context("my-ui", "react-lib", tmp_path / "my-ui")


@pytest.fixture
def scaffold_config(tmp_path: Path) -> ScaffoldConfig:
    """Config whose ecosystem root is a temporary directory."""
    root = tmp_path / "git"
    root.mkdir()
    return ScaffoldConfig(root_path=str(root), command_timeout=5)


@pytest.fixture
def manifest_file(scaffold_config: ScaffoldConfig) -> Path:
    """Ecosystem manifest with one existing package."""
    path = scaffold_config.manifest_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "version": "1.0.0",
                "packages": {
                    "@mark1russell7/cue": {
                        "repo": "github:mark1russell7/cue#main",
                        "path": "cue",
                    }
                },
            },
            indent=2,
        ),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# External commands
# ---------------------------------------------------------------------------

class CommandRecorder:
    """Stand-in for ``run_command`` that records calls and returns canned results.

    Responses are matched on the longest registered command prefix; anything
    unmatched succeeds with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[Any] = []
        self._responses: dict[tuple[str, ...], tuple[int, str, str]] = {}

    def respond(self, prefix: list[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._responses[tuple(prefix)] = (returncode, stdout, stderr)

    async def __call__(self, cmd, cwd=None, timeout=120, capture=True, env=None):
        argv = list(cmd) if isinstance(cmd, list) else cmd.split()
        self.calls.append(argv)
        self.cwds.append(cwd)
        best: tuple[int, str, str] = (0, "", "")
        best_len = -1
        for prefix, response in self._responses.items():
            if tuple(argv[: len(prefix)]) == prefix and len(prefix) > best_len:
                best, best_len = response, len(prefix)
        return best

    def commands(self, program: str) -> list[list[str]]:
        return [c for c in self.calls if c and c[0] == program]


@pytest.fixture
def commands() -> Iterator[CommandRecorder]:
    """Patch every module that spawns processes with a ``CommandRecorder``.

    Usage:
        def test_git(commands):
            commands.respond(["git", "push"], returncode=1, stderr="denied")
            ...
            assert ["git", "init"] in commands.calls
    """
    recorder = CommandRecorder()
    targets = [
        "scaffold.utils.run_command",
        "scaffold.generators.cue.run_command",
        "scaffold.workflows.lib_new.run_command",
        "scaffold.workflows.lib_refresh.run_command",
    ]
    with ExitStack() as stack:
        for target in targets:
            stack.enter_context(patch(target, recorder))
        yield recorder
