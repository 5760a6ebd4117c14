"""Exception hierarchy for the scaffolder.

Feature resolution never raises: unknown presets and feature names simply
produce smaller active sets.  Everything below signals a condition that must
abort a generation run (or a single file's generation) instead of producing
an incomplete package silently.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for every scaffolder failure."""


class RegistryIncompleteError(ScaffoldError):
    """Raised when the generator registry does not exactly cover the schema."""

    def __init__(self, missing: list[str], extra: list[str]) -> None:
        self.missing = list(missing)
        self.extra = list(extra)
        parts: list[str] = []
        if self.missing:
            parts.append(f"missing generators for: {', '.join(self.missing)}")
        if self.extra:
            parts.append(f"generators without schema entry: {', '.join(self.extra)}")
        super().__init__("Generator registry is incomplete -- " + "; ".join(parts))


class GeneratorError(ScaffoldError):
    """Raised when producing the content of a single file fails."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to generate {path}: {message}")


class UnknownGeneratorError(ScaffoldError):
    """Raised when a schema node names a synthesis function or template that does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Unknown {kind}: {identifier}")


class ToolError(ScaffoldError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed (exit {returncode}): {command}"
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)


class ManifestError(ScaffoldError):
    """Raised when the ecosystem manifest cannot be read or updated."""


class WorkflowError(ScaffoldError):
    """Raised when a step of a package workflow fails irrecoverably."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step}: {message}")


class ConfigError(ScaffoldError):
    """Raised when a configuration or feature file cannot be read or parsed."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Invalid configuration in {source}: {message}")
