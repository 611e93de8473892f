"""
Definition transformer.

Rewrites a module's define(...) call into an assignment into the shared module
table, so the bundle no longer needs a define() function at runtime:

    define("a", function (require, exports) { ... });   // note
    _p[0]={
    value: function (require, exports) { ... }};   // note

Call boundaries are located with pattern matching, not a parser. Both ends of
the call are found through find_call_head() and find_call_tail().
"""
import re

from modpack.errors import MalformedModuleError
from modpack.grammar import template_pattern

POOL_NAME = '_p'

# define(   optionally followed by a quoted name and a comma
DEFINE_HEAD = re.compile(r'\bdefine\s*\(\s*(?:(["\'])([\s\S]+?)\1\s*,\s*)?')
# Closing parenthesis of the call plus an optional semicolon
CALL_CLOSE = re.compile(r'\)\s*;?')
# One piece of module source: whitespace, comment, literal, word or single character
SOURCE_PIECE = re.compile(
    r'(?P<space>\s+)'
    r'|(?P<comment>//[^\n]*|/\*[\s\S]*?(?:\*/|\Z))'
    r'|(?P<string>"(?:[^"\\\n]|\\[\s\S])*"|\'(?:[^\'\\\n]|\\[\s\S])*\')'
    r'|(?P<template>' + template_pattern() + ')'
    r'|(?P<word>[\w$]+)'
    r'|(?P<punct>[\s\S])'
)
REGEX_LITERAL = re.compile(r'/(?![*/])(?:[^/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+/[a-zA-Z]*')
# A slash after these starts a regex literal rather than a division
REGEX_AFTER_WORDS = {
    'return', 'typeof', 'instanceof', 'in', 'of', 'new', 'delete',
    'void', 'throw', 'case', 'do', 'else', 'yield', 'await',
}
REGEX_AFTER_PUNCTUATION = '(,=:[!&|?{};+-*%<>~^'


def find_call_head(slot, source, pool_name=POOL_NAME):
    """Replace every define( head (and its name argument) with a table assignment."""
    prefix = f"{pool_name}[{slot}]={{\nvalue: "
    return DEFINE_HEAD.sub(lambda match: prefix, source)


def _regex_allowed(previous):
    """Whether a slash after the previous piece of code starts a regex literal."""
    if previous is None or previous in REGEX_AFTER_WORDS:
        return True
    return len(previous) == 1 and previous in REGEX_AFTER_PUNCTUATION


def code_end(source):
    """
    Return the index just past the last piece of source that is code.

    Source is read left to right, so '//' or '/*' inside strings, templates
    and regex literals never starts a comment.
    """
    end = 0
    previous = None
    pos = 0
    while pos < len(source):
        match = None
        if source[pos] == '/' and _regex_allowed(previous):
            match = REGEX_LITERAL.match(source, pos)
        if match is None:
            match = SOURCE_PIECE.match(source, pos)
        pos = match.end()
        if match.lastgroup in ('space', 'comment'):
            continue
        end = pos
        previous = match.group(0)
    return end


def strip_trailing_comments(source):
    """
    Remove comments and whitespace from the end of source.

    Returns:
        The source up to the last character of code.
    """
    return source[:code_end(source)]


def find_call_tail(source):
    """
    Locate the closing parenthesis of the module's define() call.

    Trailing comments are skipped, so a ')' inside them is never taken as the
    end of the call.

    Returns:
        Index of the last ')' before the trailing comments, or -1.
    """
    body = strip_trailing_comments(source)
    return body.rfind(')')


def transform_definition(slot, source, path=None, pool_name=POOL_NAME):
    """
    Rewrite a module so its definition becomes table entry `slot`.

    Args:
        slot: Slot assigned to the module by the registry
        source: Module source text
        path: Source file path, for error messages

    Returns:
        The transformed source; trailing comments stay after the new `};`.

    Raises:
        MalformedModuleError: If the define() call has no closing parenthesis
    """
    source = find_call_head(slot, source, pool_name)

    last_index = find_call_tail(source)
    if last_index == -1:
        raise MalformedModuleError(path)

    tail = CALL_CLOSE.sub('};', source[last_index:], count=1)
    return source[:last_index] + tail
