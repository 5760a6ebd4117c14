"""Ecosystem manifest updates.

The manifest is a JSON file shared by every package of the ecosystem::

    {"packages": {"@scope/name": {"repo": "github:owner/name#main", "path": "name"}}}
"""

from __future__ import annotations

import json
from pathlib import Path

from scaffold.errors import ManifestError
from scaffold.utils import dump_json, load_json


def add_to_manifest(manifest_path: str | Path, package_name: str, repo: str, path: str) -> bool:
    """Register *package_name* in the manifest.

    Returns ``False`` (and leaves the file untouched) when the package is
    already listed.

    Raises:
        ManifestError: If the manifest is missing or not valid JSON.
    """
    file_path = Path(manifest_path)
    if not file_path.exists():
        raise ManifestError(f"Ecosystem manifest not found: {file_path}")

    try:
        manifest = load_json(file_path)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Ecosystem manifest is not valid JSON: {file_path}: {exc}") from exc

    packages = manifest.setdefault("packages", {})
    if not isinstance(packages, dict):
        raise ManifestError(f"'packages' in {file_path} must be an object")
    if package_name in packages:
        return False

    packages[package_name] = {"repo": repo, "path": path}
    file_path.write_text(dump_json(manifest), encoding="utf-8")
    return True
