"""Tests for the Jinja2 template backend (scaffold.generators.template)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scaffold.errors import UnknownGeneratorError
from scaffold.generators.template import (
    TemplateRenderer,
    register_template,
    template_context,
    template_generator,
    unregister_template,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def renderer(tmp_path: Path) -> TemplateRenderer:
    """Renderer over a temporary template directory."""
    (tmp_path / "nested").mkdir()
    (tmp_path / "README.md.j2").write_text("# {{ package_name }}\n", encoding="utf-8")
    (tmp_path / "nested" / "index.ts.j2").write_text(
        "{% for f in features %}\n// {{ f }}\n{% endfor %}\n", encoding="utf-8"
    )
    (tmp_path / "notes.txt").write_text("not a template", encoding="utf-8")
    return TemplateRenderer(tmp_path)


@pytest.fixture
def registered():
    """Track names registered during a test and remove them afterwards."""
    names: list[str] = []

    def register(name, template):
        names.append(name)
        register_template(name, template)

    yield register
    for name in names:
        unregister_template(name)


class TestTemplateRenderer:
    def test_list_templates(self, renderer):
        assert renderer.list_templates() == ["README.md.j2", "nested/index.ts.j2"]

    def test_list_templates_prefix(self, renderer):
        assert renderer.list_templates("nested") == ["nested/index.ts.j2"]
        assert renderer.list_templates("missing") == []

    def test_has_template(self, renderer):
        assert renderer.has_template("README.md.j2")
        assert not renderer.has_template("notes.txt")

    def test_render_keeps_trailing_newline(self, renderer):
        assert renderer.render("README.md.j2", {"package_name": "my-lib"}) == "# my-lib\n"

    def test_trim_blocks(self, renderer):
        text = renderer.render("nested/index.ts.j2", {"features": ["ts", "cue"]})
        assert text == "// ts\n// cue\n"

    def test_render_string_is_not_html_escaped(self, renderer):
        assert renderer.render_string('"{{ name }}"', {"name": "<a & b>"}) == '"<a & b>"'

    def test_default_directory_ships_dependencies_template(self):
        assert "dependencies.json.j2" in TemplateRenderer().list_templates()


class TestTemplateContext:
    def test_features_sorted_without_core(self, react_context):
        ctx = template_context(react_context)
        assert ctx["features"] == ["cue", "npm", "react", "ts", "vitest"]
        assert ctx["package_name"] == "my-ui"
        assert ctx["full_package_name"] == "@mark1russell7/my-ui"
        assert ctx["preset"] == "react-lib"
        assert ctx["root_path"] == str(react_context.root_path)


class TestTemplateGenerator:
    def test_dependencies_json(self, lib_context):
        generate = template_generator("dependencies.json.j2")
        text = generate("dependencies.json", lib_context)
        assert json.loads(text) == {"features": ["cue", "npm", "ts", "vitest"]}
        assert text.endswith("}\n")

    def test_unknown_template(self):
        with pytest.raises(UnknownGeneratorError, match="Unknown template: missing.j2"):
            template_generator("missing.j2")

    def test_registered_string_template(self, registered, lib_context):
        registered("banner", "// {{ full_package_name }} ({{ preset }})\n")
        generate = template_generator("banner")
        assert generate("banner.ts", lib_context) == "// @mark1russell7/my-lib (lib)\n"

    def test_registered_callable_template(self, registered, lib_context):
        registered("upper", lambda ctx: ctx.package_name.upper())
        assert template_generator("upper")("x", lib_context) == "MY-LIB"

    def test_registered_template_overrides_file(self, registered, lib_context):
        registered("dependencies.json.j2", "{}\n")
        assert template_generator("dependencies.json.j2")("dependencies.json", lib_context) == "{}\n"

    def test_unregistered_after_creation(self, lib_context):
        register_template("temp", "x")
        generate = template_generator("temp")
        unregister_template("temp")
        with pytest.raises(UnknownGeneratorError):
            generate("temp", lib_context)
