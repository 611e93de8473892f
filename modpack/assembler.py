"""
Bundle assembler: wraps resolved module sources in the runtime loader and
appends the use(name) entry helper.
"""
import json

from modpack.runtime import get_loader_template, get_use_template
from modpack.transformer import POOL_NAME


def entry_point_map(registry, entrance=None):
    """
    Names exposed to use(): just the entrance if it is registered, otherwise all.
    """
    if entrance is not None and entrance in registry:
        return {entrance: registry.lookup(entrance)}
    return registry.mapping


def wrap(source, pool_name=POOL_NAME):
    """Splice module sources into the loader template."""
    template = get_loader_template().replace('$name', pool_name)
    return template.replace('$source;', source, 1)


def get_use_section(registry, entrance=None, pool_name=POOL_NAME):
    """Render the module mapping and the use(name) function."""
    mapping = json.dumps(entry_point_map(registry, entrance), ensure_ascii=False)
    return (get_use_template()
            .replace('$name', pool_name)
            .replace('$mapping', mapping))


def assemble(source, registry, entrance=None, pool_name=POOL_NAME):
    """
    Build the final bundle text.

    Args:
        source: Module sources with definitions and requires already rewritten
        registry: ModuleRegistry of the current target
        entrance: Optional module name that use() should expose on its own

    Returns:
        Loader, modules and entry helper as one JavaScript source.
    """
    return wrap(source, pool_name) + '\n' + get_use_section(registry, entrance, pool_name)
