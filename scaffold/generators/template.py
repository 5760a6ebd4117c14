"""Template generator.

Provides the ``TemplateRenderer`` which loads Jinja2 templates from the
``scaffold/generators/templates/`` directory, plus a small registry of
templates defined in code (either inline Jinja2 strings or Python callables).
Schema nodes refer to templates by name; :func:`template_generator` turns
such a name into a generator function.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader

from scaffold.errors import UnknownGeneratorError
from scaffold.schema.types import Feature, GeneratorContext, GeneratorFn

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

TemplateSpec = Union[str, Callable[[GeneratorContext], str]]


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for generated package files.

    The renderer discovers ``.j2`` template files under a configurable
    template directory and renders them with a context dictionary derived
    from the ``GeneratorContext`` of the current run.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template file with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"dependencies.json.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def has_template(self, template_path: str) -> bool:
        return template_path in self.list_templates()

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


def template_context(context: GeneratorContext) -> dict[str, Any]:
    """Flatten a ``GeneratorContext`` into Jinja2 variables.

    ``features`` lists the active feature names without ``core``, sorted.
    """
    return {
        "package_name": context.package_name,
        "full_package_name": context.full_package_name,
        "preset": context.preset,
        "root_path": str(context.root_path),
        "features": sorted(f.value for f in context.features if f is not Feature.CORE),
    }


# ---------------------------------------------------------------------------
# Template registry
# ---------------------------------------------------------------------------

_renderer = TemplateRenderer()
_templates: dict[str, TemplateSpec] = {}


def register_template(name: str, template: TemplateSpec) -> None:
    """Register a template defined in code.

    *template* is either a Jinja2 source string or a callable receiving the
    ``GeneratorContext``.  Registered templates take precedence over files
    in the template directory.
    """
    _templates[name] = template


def unregister_template(name: str) -> None:
    _templates.pop(name, None)


def template_generator(template_name: str) -> GeneratorFn:
    """Create a generator function rendering *template_name*.

    Raises:
        UnknownGeneratorError: If no registered or file template has that name.
    """
    if template_name not in _templates and not _renderer.has_template(template_name):
        raise UnknownGeneratorError("template", template_name)

    def generate(path: str, context: GeneratorContext) -> str:
        spec = _templates.get(template_name)
        if spec is None:
            if not _renderer.has_template(template_name):
                raise UnknownGeneratorError("template", template_name)
            return _renderer.render(template_name, template_context(context))
        if callable(spec):
            return spec(context)
        return _renderer.render_string(spec, template_context(context))

    generate.__name__ = f"template_generator[{template_name}]"
    return generate

