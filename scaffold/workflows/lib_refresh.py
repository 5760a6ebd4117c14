"""Package refresh workflow.

Refreshes a single package, with dry-run support:

1. Cleanup (only with ``force``): node_modules/, dist/, pnpm-lock.yaml,
   tsconfig.tsbuildinfo.
2. ``pnpm install``.
3. ``pnpm run build``.
4. Commit and push pending changes (unless ``skip_git``).
"""

from __future__ import annotations

import shutil
from collections.abc import Awaitable, Callable
from pathlib import Path

from pydantic import BaseModel, Field

from scaffold.config import ScaffoldConfig
from scaffold.errors import WorkflowError
from scaffold.utils import print_info, print_summary_table, print_warning, run_command

CLEANUP_TARGETS: tuple[str, ...] = (
    "node_modules",
    "dist",
    "pnpm-lock.yaml",
    "tsconfig.tsbuildinfo",
)


class LibRefreshOptions(BaseModel):
    """Options for refreshing a package."""

    package_path: Path
    package_name: str = Field(..., min_length=1)
    force: bool = False
    skip_git: bool = False
    dry_run: bool = False


class RefreshStepResult(BaseModel):
    """Result of one refresh step."""

    step: str
    success: bool
    message: str
    skipped: bool = False


class LibRefresh:
    """Runs the refresh steps for one package and records their results."""

    def __init__(self, options: LibRefreshOptions, config: ScaffoldConfig | None = None) -> None:
        self.options = options
        self.config = config or ScaffoldConfig()
        self.results: list[RefreshStepResult] = []

    def _record(self, step: str, success: bool, message: str, skipped: bool = False) -> None:
        self.results.append(
            RefreshStepResult(step=step, success=success, message=message, skipped=skipped)
        )

    def _fail(self, step: str, message: str) -> WorkflowError:
        self._record(step, False, message)
        return WorkflowError(step, message)

    async def run(self) -> list[RefreshStepResult]:
        """Run every step; results of earlier runs are discarded.

        Raises:
            WorkflowError: If a step fails.  The failed step is recorded in
                :attr:`results` before the error propagates.
        """
        self.results = []
        print_info(f"Refreshing {self.options.package_name} at {self.options.package_path}")
        if self.options.dry_run:
            print_warning("=== DRY RUN MODE ===")

        steps: list[Callable[[], Awaitable[None]]] = [
            self.cleanup,
            self.install,
            self.build,
            self.git,
        ]
        for step in steps:
            await step()

        print_summary_table(
            {r.step: ("skipped: " if r.skipped else "") + r.message for r in self.results},
            title=f"Refresh {self.options.package_name}",
        )
        return list(self.results)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def cleanup(self) -> None:
        if not self.options.force:
            self._record("cleanup", True, "Skipped (force not set)", skipped=True)
            return

        root = self.options.package_path
        present = [name for name in CLEANUP_TARGETS if (root / name).exists()]
        if not present:
            self._record("cleanup", True, "Nothing to clean up")
            return

        labels = ", ".join(f"{name}/" if (root / name).is_dir() else name for name in present)
        if self.options.dry_run:
            self._record("cleanup", True, f"Would delete: {labels}")
            print_info(f"[DRY-RUN] Would delete: {labels}")
            return

        try:
            for name in present:
                target = root / name
                if target.is_dir():
                    shutil.rmtree(target)
                else:
                    target.unlink()
        except OSError as exc:
            raise self._fail("cleanup", f"Cleanup failed: {exc}") from exc

        self._record("cleanup", True, f"Deleted: {labels}")
        print_info(f"Deleted: {labels}")

    async def _pnpm(self, step: str, args: list[str], timeout: int) -> None:
        label = " ".join(["pnpm", *args])
        if self.options.dry_run:
            self._record(step, True, f"Would run: {label}")
            print_info(f"[DRY-RUN] Would run: {label} in {self.options.package_path}")
            return

        print_info(f"Running {label} in {self.options.package_path}")
        returncode, _, stderr = await run_command(
            ["pnpm", *args], cwd=self.options.package_path, timeout=timeout
        )
        if returncode != 0:
            raise self._fail(step, f"{label} failed: {stderr}")
        self._record(step, True, f"{label} succeeded")

    async def install(self) -> None:
        await self._pnpm("install", ["install"], self.config.install_timeout)

    async def build(self) -> None:
        await self._pnpm("build", ["run", "build"], self.config.build_timeout)

    async def git(self) -> None:
        """Commit and push pending changes, if any."""
        if self.options.skip_git:
            self._record("git", True, "Skipped (skipGit set)", skipped=True)
            return

        cwd = self.options.package_path
        timeout = self.config.command_timeout
        returncode, status, stderr = await run_command(
            ["git", "status", "--porcelain"], cwd=cwd, timeout=timeout
        )
        if returncode != 0:
            raise self._fail("git", f"Git operations failed: {stderr}")

        if not status:
            self._record("git", True, "No changes to commit")
            print_info("No changes to commit")
            return

        if self.options.dry_run:
            self._record("git", True, "Would commit and push changes")
            print_info("[DRY-RUN] Would commit and push changes")
            return

        message = f"Refreshed package {self.options.package_name}"
        for cmd in (
            ["git", "add", "-A"],
            ["git", "commit", "-m", message],
            ["git", "push"],
        ):
            returncode, _, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
            if returncode != 0:
                raise self._fail("git", f"Git operations failed: {' '.join(cmd)}: {stderr}")

        self._record("git", True, "Committed and pushed changes")
        print_info("Committed and pushed changes")
