"""
Module naming.

A module is named by the string literal passed to define(), or failing that by
its file path relative to the base directory.
"""
import os
import re

# define("name", ...   /   define('name', ...
NAMED_DEFINE = re.compile(r'\bdefine\s*\(\s*(["\'])([\s\S]+?)\1\s*,\s*')
SOURCE_EXTENSION = re.compile(r'\.js$')


def unescape_name(literal):
    """Drop backslash escapes from a quoted name literal."""
    return re.sub(r'\\(.)', r'\1', literal)


def get_module_name(base, filepath, source):
    """
    Return the canonical module name for a source file.

    Args:
        base: Base directory that fallback names are relative to
        filepath: Path of the module file
        source: Raw source text of the module

    Returns:
        The explicit define() name if there is one, otherwise the normalized
        path of the file relative to base, without its extension.
    """
    match = NAMED_DEFINE.search(source)
    if match:
        return unescape_name(match.group(2))

    base_prefix = os.path.abspath(base) + os.sep
    path = os.path.abspath(filepath)
    if path.startswith(base_prefix):
        path = path[len(base_prefix):]
    path = SOURCE_EXTENSION.sub('', path)
    return path.replace('\\', '/')
