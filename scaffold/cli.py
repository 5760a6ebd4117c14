"""Command-line entry point.

Usage::

    scaffold new my-lib --preset react-lib
    scaffold refresh ~/git/my-lib --force --dry-run
    scaffold plan my-lib --preset app
    scaffold presets
    scaffold check
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.markup import escape

from scaffold.config import ScaffoldConfig
from scaffold.errors import ScaffoldError
from scaffold.features import FeatureResolver
from scaffold.generation import plan_package
from scaffold.generators.registry import GENERATORS
from scaffold.schema.repo_schema import REPO_SCHEMA
from scaffold.schema.walker import validate_registry
from scaffold.utils import console, print_error, print_success, print_summary_table
from scaffold.workflows import LibNew, LibNewOptions, LibRefresh, LibRefreshOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffold",
        description="Schema-driven package scaffolding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  scaffold new my-lib\n"
            "  scaffold new my-app --preset app --skip-git\n"
            "  scaffold refresh ~/git/my-lib --force --dry-run\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (defaults to SCAFFOLD_* environment variables)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new package")
    new.add_argument("name", help="Package short name")
    new.add_argument("--preset", default=None, help="Feature preset (default: from config)")
    new.add_argument("--root", default=None, help="Ecosystem root directory (default: ~/git)")
    new.add_argument("--skip-git", action="store_true", help="Skip git init and GitHub repo")
    new.add_argument("--skip-manifest", action="store_true", help="Skip the manifest update")

    refresh = sub.add_parser("refresh", help="Reinstall, rebuild and push a package")
    refresh.add_argument("path", type=Path, help="Package directory")
    refresh.add_argument("--name", default=None, help="Package name (default: directory name)")
    refresh.add_argument("--force", action="store_true", help="Delete node_modules, dist and lock file first")
    refresh.add_argument("--skip-git", action="store_true", help="Do not commit or push")
    refresh.add_argument("--dry-run", action="store_true", help="Report what would happen")

    plan = sub.add_parser("plan", help="Show which files a preset generates")
    plan.add_argument("name", help="Package short name")
    plan.add_argument("--preset", default=None)

    sub.add_parser("presets", help="List available presets")
    sub.add_parser("check", help="Validate the generator registry against the schema")
    return parser


def _load_config(path: Path | None) -> ScaffoldConfig:
    if path is not None:
        return ScaffoldConfig.load(path)
    return ScaffoldConfig.from_env()


def _cmd_new(args: argparse.Namespace, config: ScaffoldConfig) -> int:
    options = LibNewOptions(
        name=args.name,
        preset=args.preset,
        root_path=args.root,
        skip_git=args.skip_git,
        skip_manifest=args.skip_manifest,
    )
    workflow = LibNew(options, config)
    asyncio.run(workflow.run())
    print_success(f"Created {config.full_package_name(workflow.name)}")
    return 0


def _cmd_refresh(args: argparse.Namespace, config: ScaffoldConfig) -> int:
    path = args.path.expanduser()
    options = LibRefreshOptions(
        package_path=path,
        package_name=args.name or path.name,
        force=args.force,
        skip_git=args.skip_git,
        dry_run=args.dry_run,
    )
    asyncio.run(LibRefresh(options, config).run())
    print_success(f"Refreshed {options.package_name}")
    return 0


def _cmd_plan(args: argparse.Namespace, config: ScaffoldConfig) -> int:
    preset = args.preset or config.default_preset
    features = FeatureResolver(config.feature_config()).resolve(preset)
    plan = plan_package(REPO_SCHEMA, features)
    print_summary_table(
        {
            "Package": config.full_package_name(args.name),
            "Preset": preset,
            "Features": ", ".join(f.value for f in plan.features),
            "Directories": ", ".join(plan.directories) or "-",
            "Files": ", ".join(plan.files) or "-",
            "Skipped": ", ".join(s.path for s in plan.skipped) or "-",
        },
        title="Generation plan",
    )
    return 0


def _cmd_presets(args: argparse.Namespace, config: ScaffoldConfig) -> int:
    resolver = FeatureResolver(config.feature_config())
    print_summary_table(
        {preset: ", ".join(resolver.preset_features(preset)) for preset in resolver.presets()},
        title="Presets",
    )
    return 0


def _cmd_check(args: argparse.Namespace, config: ScaffoldConfig) -> int:
    result = validate_registry(REPO_SCHEMA, GENERATORS)
    if result.valid:
        print_success(f"Generator registry covers all {len(GENERATORS)} schema files")
        return 0
    for path in result.missing:
        print_error(f"missing generator: {path}")
    for path in result.extra:
        print_error(f"generator without schema entry: {path}")
    return 1


_COMMANDS = {
    "new": _cmd_new,
    "refresh": _cmd_refresh,
    "plan": _cmd_plan,
    "presets": _cmd_presets,
    "check": _cmd_check,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``scaffold`` / ``python -m scaffold.cli``."""
    args = build_parser().parse_args(argv)
    try:
        config = _load_config(args.config)
        return _COMMANDS[args.command](args, config)
    except ScaffoldError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
