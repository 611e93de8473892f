"""
Require resolver: turns require("name") calls into slot lookups on the table.
"""
import re

from modpack.errors import UnresolvedModuleError
from modpack.result import Ok, Err
from modpack.transformer import POOL_NAME

# require("name")   /   require('name')
REQUIRE_CALL = re.compile(r'\brequire\s*\(\s*(["\'])([\s\S]*?)\1\s*\)')


def resolve_requires(source, registry, pool_name=POOL_NAME):
    """
    Replace every require("name") in the concatenated bundle with `_p.r(slot)`.

    This runs once over the whole bundle, so a module may require a module that
    is listed after it. It is a textual pass: a matching string anywhere in the
    source is rewritten too.

    Args:
        source: Concatenated, transformed module sources
        registry: ModuleRegistry of the current target

    Returns:
        Ok(resolved_source), or Err(UnresolvedModuleError) naming every module
        that could not be found.
    """
    missing = []

    def replacer(match):
        module_name = match.group(2)
        slot = registry.lookup(module_name)
        if slot is None:
            if module_name not in missing:
                missing.append(module_name)
            return match.group(0)
        return f"{pool_name}.r({slot})"

    resolved = REQUIRE_CALL.sub(replacer, source)

    if missing:
        return Err(UnresolvedModuleError(missing))
    return Ok(resolved)
