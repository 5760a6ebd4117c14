"""Package creation workflow.

Creates a new ecosystem package in ordered steps:

1. Generate the schema files enabled by the preset (except CUE-backed ones).
2. ``cue-config init`` -- writes the preset's ``dependencies.json``.
3. ``cue-config generate`` -- package.json, tsconfig.json, .gitignore.
4. ``cue-config validate-structure``.
5. ``git init`` + initial commit.
6. Create the GitHub repository and push (failures only warn).
7. Register the package in the ecosystem manifest.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from scaffold.config import ScaffoldConfig
from scaffold.errors import ManifestError, ScaffoldError, WorkflowError
from scaffold.generation import generate_package
from scaffold.generators.cue import (
    run_cue_config_generate,
    run_cue_config_init,
    run_cue_config_validate,
)
from scaffold.manifest import add_to_manifest
from scaffold.schema.types import Generator
from scaffold.utils import (
    format_duration,
    print_debug,
    print_info,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
    require_success,
    run_command,
    sanitize_name,
)


class LibNewOptions(BaseModel):
    """Options for creating a package."""

    name: str = Field(..., min_length=1, description="Package short name")
    preset: str | None = Field(default=None, description="Feature preset (defaults to config)")
    root_path: str | None = Field(default=None, description="Override of the ecosystem root")
    skip_git: bool = False
    skip_manifest: bool = False


class LibNew:
    """Creates a package from the repository schema and bootstraps it.

    Attributes:
        options: What to create.
        config: Scaffolder configuration (scope, root, timeouts).
        summary: Per-step results accumulated during :meth:`run`.
    """

    def __init__(self, options: LibNewOptions, config: ScaffoldConfig | None = None) -> None:
        self.options = options
        config = config or ScaffoldConfig()
        if options.root_path:
            config = config.model_copy(update={"root_path": options.root_path})
        self.config = config
        self.name = sanitize_name(options.name)
        if not self.name:
            raise WorkflowError("options", f"Invalid package name: {options.name!r}")
        self.preset = options.preset or config.default_preset
        self.package_path: Path = config.package_path(self.name)
        self.summary: dict[str, Any] = {}

    async def run(self) -> dict[str, Any]:
        """Execute every step in order and return the accumulated summary.

        Raises:
            WorkflowError: If a step fails; later steps are not attempted.
        """
        steps: list[tuple[str, Callable[[], Awaitable[Any]]]] = [
            ("generate", self.generate_files),
            ("cue-config init", self.cue_config_init),
            ("cue-config generate", self.cue_config_generate),
            ("validate structure", self.validate_structure),
            ("git init", self.git_init),
            ("github", self.create_github_repo),
            ("manifest", self.add_to_manifest),
        ]

        started = time.monotonic()
        for number, (name, step) in enumerate(steps, start=1):
            print_step(number, name)
            try:
                self.summary[name] = await step()
            except WorkflowError:
                raise
            except ScaffoldError as exc:
                raise WorkflowError(name, str(exc)) from exc

        elapsed = format_duration(time.monotonic() - started)
        print_summary_table(
            {
                "Package": self.config.full_package_name(self.name),
                "Path": str(self.package_path),
                "Preset": self.preset,
                "Duration": elapsed,
            },
            title="Package created",
        )
        return self.summary

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def generate_files(self) -> dict[str, Any]:
        """Create the directories and non-CUE files enabled by the preset."""
        if self.package_path.exists() and any(self.package_path.iterdir()):
            raise WorkflowError("generate", f"{self.package_path} already exists and is not empty")

        print_info(f"Creating package structure at {self.package_path}")
        print_info(f"Using preset: {self.preset}")

        result = await generate_package(
            self.name,
            self.preset,
            self.package_path,
            feature_config=self.config.feature_config(),
            scope=self.config.scope,
            skip=[Generator.CUE],
        )

        print_info(f"Active features: {', '.join(f.value for f in result.features)}")
        for directory in result.directories:
            print_info(f"Created directory: {directory}")
        for path in result.written:
            print_info(f"Generated: {path}")
        for skipped in result.skipped:
            print_debug(f"Skipping {skipped.path} ({skipped.reason})")

        return {
            "features": [f.value for f in result.features],
            "directories": result.directories,
            "files": result.written,
        }

    async def cue_config_init(self) -> bool:
        print_info(f"Running cue-config init --preset {self.preset}")
        await run_cue_config_init(self.package_path, self.preset, timeout=self.config.command_timeout)
        return True

    async def cue_config_generate(self) -> bool:
        print_info("Running cue-config generate")
        await run_cue_config_generate(self.package_path, timeout=self.config.command_timeout)
        return True

    async def validate_structure(self) -> bool:
        print_info("Validating project structure")
        await run_cue_config_validate(self.package_path, timeout=self.config.command_timeout)
        return True

    async def git_init(self) -> bool:
        """Initialise the repository with an initial commit."""
        if self.options.skip_git:
            print_info("Skipping git init")
            return False

        print_info("Initializing git repository")
        for cmd in (
            ["git", "init"],
            ["git", "add", "-A"],
            ["git", "commit", "-m", "Initial commit"],
        ):
            await require_success(cmd, cwd=self.package_path, timeout=self.config.command_timeout)
        return True

    async def create_github_repo(self) -> bool:
        """Create the private GitHub repository and push ``main``.

        The repository may already exist, so failures only produce a warning.
        """
        if self.options.skip_git:
            print_info("Skipping GitHub repo creation")
            return False

        print_info("Creating GitHub repository")
        for cmd in (
            ["gh", "repo", "create", self.config.repo_slug(self.name), "--private", "--source", "."],
            ["git", "push", "-u", "origin", "main"],
        ):
            returncode, _, stderr = await run_command(
                cmd, cwd=self.package_path, timeout=self.config.command_timeout
            )
            if returncode != 0:
                print_warning(f"  GitHub repo creation may have failed: {stderr}")
                return False
        return True

    async def add_to_manifest(self) -> bool:
        """Register the package in the ecosystem manifest (missing manifest only warns)."""
        if self.options.skip_manifest:
            print_info("Skipping manifest update")
            return False

        manifest_path = self.config.manifest_path
        if not manifest_path.exists():
            print_warning("  Ecosystem manifest not found, skipping")
            return False

        package_name = self.config.full_package_name(self.name)
        try:
            added = add_to_manifest(
                manifest_path,
                package_name,
                repo=f"github:{self.config.repo_slug(self.name)}#main",
                path=self.name,
            )
        except ManifestError as exc:
            raise WorkflowError("manifest", str(exc)) from exc

        if added:
            print_success(f"Added {package_name} to ecosystem manifest")
        else:
            print_info(f"Package {package_name} already in manifest")
        return added
