"""
Output formatter - parses an assembled bundle and re-prints it with a stable layout.

The layout only depends on the token stream and on where the input already
had line breaks, so formatting a formatted bundle gives the same text back.
Comments are kept where they are.
"""

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput

from modpack.errors import MalformedBundleError, get_line_context
from modpack.grammar import bundle_grammar

INDENT = "    "

OPENERS = {'LPAR', 'LSQB', 'LBRACE'}
CLOSERS = {'RPAR', 'RSQB', 'RBRACE'}

# Tokens after which a + or - is binary and ++/-- is postfix
OPERAND_END = {'NAME', 'NUMBER', 'STRING', 'TEMPLATE', 'REGEX', 'RPAR', 'RSQB', 'INCDEC'}
# Names written with a space before their parenthesis: switch (...)
CONTROL_WORDS = {'switch', 'catch'}
# Words that continue a statement after a closing brace: } else {
BLOCK_CONTINUATIONS = {'else', 'catch', 'finally', 'while', 'in', 'instanceof'}
STATEMENT_START = {'NAME', 'KEYWORD', 'CONTROL', 'NUMBER', 'STRING', 'TEMPLATE'}

_parser = None


def get_parser():
    """Return the shared LALR parser for bundles."""
    global _parser
    if _parser is None:
        _parser = Lark(bundle_grammar, parser='lalr')
    return _parser


class TokenFlattener(Transformer):
    """Collapses the group tree back into a flat token list, in source order."""

    def _flatten(self, items):
        tokens = []
        for item in items:
            if isinstance(item, list):
                tokens.extend(item)
            else:
                tokens.append(item)
        return tokens

    def start(self, items):
        return self._flatten(items)

    def paren(self, items):
        return self._flatten(items)

    def cond(self, items):
        return self._flatten(items)

    def bracket(self, items):
        return self._flatten(items)

    def brace(self, items):
        return self._flatten(items)


class _Frame:
    """An open (), [] or {} group while printing."""

    def __init__(self, kind):
        self.kind = kind  # Opening token type, None at top level
        self.indented = False  # Contents start on a new line
        self.pending_ternary = 0  # '?' still waiting for its ':'


def _is_line_comment(token):
    return token.type == 'COMMENT' and token.value.startswith('//')


def _line_breaks(prev, tok, frame):
    """How many newlines go between prev and tok: 0, 1, or 2 for a blank line."""
    if prev is None:
        return 0
    original = min(tok.line - prev.end_line, 2)

    if _is_line_comment(prev):
        return max(original, 1)
    if tok.type == 'COMMENT' and original == 0:
        return 0  # Trailing comment stays on its line

    rule = 0
    if prev.type == 'LBRACE':
        rule = 0 if tok.type == 'RBRACE' else 1
    elif tok.type == 'RBRACE':
        rule = 1
    elif prev.type == 'SEMI' and frame.kind != 'LPAR':
        rule = 1
    elif (prev.type == 'RBRACE' and tok.type in STATEMENT_START
            and tok.value not in BLOCK_CONTINUATIONS):
        rule = 1
    return max(rule, original)


def _needs_space(before, prev, tok, ternary_colon):
    """Whether a space separates prev and tok when they share a line."""
    if tok.type == 'COMMENT' or prev.type == 'COMMENT':
        return True
    if prev.type == 'DIV' or tok.type == 'DIV':
        # Keep the input's spacing: a misread regex literal stays intact
        return tok.start_pos != prev.end_pos
    if prev.type in OPENERS or tok.type in CLOSERS:
        return False
    if tok.type in ('COMMA', 'SEMI'):
        return False
    if tok.value == ':':
        return ternary_colon
    if tok.value in ('.', '?.'):
        return prev.type == 'NUMBER'  # 1 .toString()
    if prev.type == 'OP' and prev.value in ('.', '?.', '...', '!', '~'):
        return False
    if tok.type == 'INCDEC':
        return prev.type not in OPERAND_END
    if prev.type == 'INCDEC':
        prefix = before is None or before.type not in OPERAND_END
        return not prefix
    if prev.type == 'OP' and prev.value in ('+', '-'):
        if before is None or before.type not in OPERAND_END:
            # Unary sign binds to its operand, but never forms ++, --, +=, ...
            return tok.type in ('OP', 'INCDEC')
    if tok.type == 'LPAR':
        return not (prev.type in ('NAME', 'RPAR', 'RSQB') and prev.value not in CONTROL_WORDS)
    if tok.type == 'LSQB':
        return prev.type not in ('NAME', 'RPAR', 'RSQB', 'STRING', 'TEMPLATE')
    return True


def layout(tokens):
    """Print a flat token list as formatted source text."""
    lines = []
    current = []
    stack = [_Frame(None)]
    before = prev = None

    for tok in tokens:
        frame = stack[-1]
        breaks = _line_breaks(prev, tok, frame)

        if prev is not None and prev.type in OPENERS and tok.type not in CLOSERS:
            frame.indented = breaks > 0 or frame.kind == 'LBRACE'
        if tok.type in CLOSERS and len(stack) > 1:
            stack.pop()

        ternary_colon = False
        if tok.value == '?' and tok.type == 'OP':
            frame.pending_ternary += 1
        elif tok.value == ':' and tok.type == 'OP' and frame.pending_ternary:
            frame.pending_ternary -= 1
            ternary_colon = True

        if breaks:
            lines.append(''.join(current).rstrip())
            if breaks > 1:
                lines.append('')
            depth = sum(1 for f in stack if f.indented)
            current = [INDENT * depth]
        elif prev is not None and _needs_space(before, prev, tok, ternary_colon):
            current.append(' ')
        current.append(tok.value)

        if tok.type in OPENERS:
            stack.append(_Frame(tok.type))
        before, prev = prev, tok

    lines.append(''.join(current).rstrip())
    return '\n'.join(lines).strip('\n') + '\n'


def format_source(source):
    """
    Parse an assembled bundle and re-emit it in canonical layout.

    Args:
        source: JavaScript source of the whole bundle

    Returns:
        The formatted source, ending with a single newline

    Raises:
        MalformedBundleError: If the bundle cannot be parsed
    """
    try:
        tree = get_parser().parse(source)
    except UnexpectedInput as e:
        line_number = getattr(e, 'line', None)
        if line_number is not None and line_number < 1:
            line_number = None
        raise MalformedBundleError(
            message=f"Cannot parse the assembled bundle: {e.__class__.__name__}",
            line_number=line_number,
            column=getattr(e, 'column', None),
            context=get_line_context(source, line_number),
            suggestion="Check the module around this line for unbalanced brackets or unterminated strings",
        )

    tokens = TokenFlattener().transform(tree)
    return layout(tokens)
