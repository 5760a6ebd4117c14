"""Generator backends and the path -> generator registry.

Three interchangeable backends produce file content:

* ``cue`` -- delegates to ``cue eval`` / ``cue-config``.
* ``morph`` -- synthesises TypeScript sources in memory.
* ``template`` -- renders Jinja2 templates.

Quick usage::

    from scaffold.generators import get_generator, invoke_generator

    content = await invoke_generator(get_generator("src/index.ts"), "src/index.ts", context)
"""

from scaffold.generators.cue import (
    cue_generator,
    run_cue_config_generate,
    run_cue_config_init,
    run_cue_config_validate,
)
from scaffold.generators.morph import (
    MORPH_FUNCTIONS,
    SourceFile,
    generate_index_ts,
    generate_register_ts,
    generate_test_file,
    generate_vitest_config,
    morph_generator,
)
from scaffold.generators.registry import (
    GENERATORS,
    GeneratorRegistry,
    build_registry,
    create_generator_registry,
    empty_generator,
    generator_for,
    get_generator,
    invoke_generator,
)
from scaffold.generators.template import (
    TemplateRenderer,
    register_template,
    template_generator,
    unregister_template,
)

__all__ = [
    "GENERATORS",
    "GeneratorRegistry",
    "MORPH_FUNCTIONS",
    "SourceFile",
    "TemplateRenderer",
    "build_registry",
    "create_generator_registry",
    "cue_generator",
    "empty_generator",
    "generate_index_ts",
    "generate_register_ts",
    "generate_test_file",
    "generate_vitest_config",
    "generator_for",
    "get_generator",
    "invoke_generator",
    "morph_generator",
    "register_template",
    "run_cue_config_generate",
    "run_cue_config_init",
    "run_cue_config_validate",
    "template_generator",
    "unregister_template",
]
