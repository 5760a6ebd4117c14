"""In-memory TypeScript source synthesis.

Each synthesis function builds a ``SourceFile`` in memory (import
declarations first, then free-form statements) and returns its full text.
Schema nodes refer to these functions by name through ``MORPH_FUNCTIONS``.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable

from scaffold.errors import UnknownGeneratorError
from scaffold.schema.types import GeneratorContext, GeneratorFn


class SourceFile:
    """A TypeScript source file assembled in memory."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        self._imports: list[tuple[str, list[str]]] = []
        self._statements: list[str] = []

    def add_import_declaration(self, module_specifier: str, named_imports: list[str]) -> None:
        """Add ``import { a, b } from "module";``, merging repeated modules."""
        for index, (module, names) in enumerate(self._imports):
            if module == module_specifier:
                merged = names + [n for n in named_imports if n not in names]
                self._imports[index] = (module, merged)
                return
        self._imports.append((module_specifier, list(named_imports)))

    def add_statements(self, text: str) -> None:
        """Append a block of statements; surrounding blank lines are trimmed."""
        block = textwrap.dedent(text).strip("\n")
        if block:
            self._statements.append(block)

    def get_full_text(self) -> str:
        parts: list[str] = []
        if self._imports:
            parts.append(
                "\n".join(
                    f'import {{ {", ".join(names)} }} from "{module}";'
                    for module, names in self._imports
                )
            )
        parts.extend(self._statements)
        if not parts:
            return ""
        return "\n\n".join(parts) + "\n"


# ---------------------------------------------------------------------------
# Synthesis functions
# ---------------------------------------------------------------------------


def generate_vitest_config(path: str, context: GeneratorContext) -> str:
    """Generate ``vitest.config.ts`` extending the shared test config."""
    source = SourceFile(path)
    source.add_import_declaration("vitest/config", ["defineConfig"])
    source.add_import_declaration("@mark1russell7/test", ["sharedConfig"])
    source.add_statements(
        """
        export default defineConfig({
          ...sharedConfig,
          test: {
            ...sharedConfig.test,
            include: ["src/**/*.test.ts"],
          },
        });
        """
    )
    return source.get_full_text()


def generate_index_ts(path: str, context: GeneratorContext) -> str:
    """Generate the ``src/index.ts`` entry point."""
    source = SourceFile(path)
    source.add_statements(
        f"""
        /**
         * {context.full_package_name}
         *
         * @packageDocumentation
         */

        // Entry point
        export {{}};
        """
    )
    return source.get_full_text()


def generate_test_file(path: str, context: GeneratorContext) -> str:
    """Generate a smoke test for the package."""
    source = SourceFile(path)
    source.add_import_declaration("vitest", ["describe", "it", "expect"])
    source.add_statements(
        f"""
        describe("{context.package_name}", () => {{
          it("should work", () => {{
            expect(true).toBe(true);
          }});
        }});
        """
    )
    return source.get_full_text()


def generate_register_ts(path: str, context: GeneratorContext) -> str:
    """Generate ``register.ts`` for procedure packages."""
    source = SourceFile(path)
    source.add_import_declaration("@mark1russell7/client", ["registerProcedures"])
    source.add_statements(
        """
        // Register procedures here
        registerProcedures([]);
        """
    )
    return source.get_full_text()


MORPH_FUNCTIONS: dict[str, Callable[[str, GeneratorContext], str]] = {
    "generate_vitest_config": generate_vitest_config,
    "generate_index_ts": generate_index_ts,
    "generate_test_file": generate_test_file,
    "generate_register_ts": generate_register_ts,
}


def morph_generator(function_name: str) -> GeneratorFn:
    """Look up a synthesis function by name.

    Raises:
        UnknownGeneratorError: If no function is registered under *function_name*.
    """
    try:
        return MORPH_FUNCTIONS[function_name]
    except KeyError:
        raise UnknownGeneratorError("synthesis function", function_name) from None
