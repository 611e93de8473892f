"""
Bundle grammar.

This module contains the Lark grammar used by the output formatter. It does not
describe JavaScript statements; it reads a bundle as a stream of tokens nested
in balanced (), [] and {} groups, which is enough to re-print it.

The sequence rules track whether an operand was just read (_o) or one is
expected (_e). With the LALR contextual lexer this decides whether a '/' starts
a regular expression literal (REGEX, only after _e) or is a division (DIV,
only after _o). The parenthesized header of if/while/for/with is its own group
(cond) because an operand is expected after it, unlike after a call.
"""

# Templates may nest inside ${...} substitutions this many levels deep
TEMPLATE_DEPTH = 2

# Pieces of the template pattern. A slash is written as \x2f so the pattern can
# be placed inside a /.../ grammar literal.
_DOUBLE_QUOTED = r'"(?:[^"\\\n]|\\[\s\S])*"'
_SINGLE_QUOTED = r"'(?:[^'\\\n]|\\[\s\S])*'"
_COMMENT = r'\x2f\x2f[^\n]*|\x2f\*[\s\S]*?\*\x2f'
_TEMPLATE_TEXT = r'[^`\\$]|\\[\s\S]|\$(?!\{)'


def template_pattern(depth=TEMPLATE_DEPTH):
    """
    Regular expression for a whole template literal, substitutions included.

    Inside ${...} it skips strings, comments, nested templates (up to depth
    levels) and two levels of braces, so a backtick or '}' in there does not
    end the literal early. A literal nested deeper does not match at all.
    """
    if depth == 0:
        return '`(?:' + _TEMPLATE_TEXT + ')*`'
    code = '|'.join([
        r'[^`"\'{}\x2f]',
        r'\x2f(?![\x2f*])',
        _DOUBLE_QUOTED,
        _SINGLE_QUOTED,
        _COMMENT,
        template_pattern(depth - 1),
    ])
    block = r'\{(?:' + code + r'|\{(?:' + code + r')*\})*\}'
    substitution = r'\$\{(?:' + code + '|' + block + r')*\}'
    return '`(?:' + _TEMPLATE_TEXT + '|' + substitution + ')*`'


bundle_grammar = r"""
    start: _seq?

    _seq: _e | _o

    _e: _to_e | COMMENT | INCDEC
      | _e _to_e | _e COMMENT | _e INCDEC
      | _o _to_e | _o DIV
    _o: _operand | REGEX
      | _e _operand | _e REGEX
      | _o _operand | _o COMMENT | _o INCDEC

    _to_e: OP | KEYWORD | COMMA | SEMI | brace | CONTROL cond
    _operand: NAME | NUMBER | STRING | TEMPLATE | paren | bracket

    paren: LPAR _seq? RPAR
    cond: LPAR _seq? RPAR
    bracket: LSQB _seq? RSQB
    brace: LBRACE _seq? RBRACE

    // --- Terminals ---
    COMMENT: /\/\/[^\n]*|\/\*[\s\S]*?\*\//
    REGEX: /\/(?![*\/])(?:[^\/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+\/[a-zA-Z]*/
    DIV: /\/=?/
    STRING: /"(?:[^"\\\n]|\\[\s\S])*"|'(?:[^'\\\n]|\\[\s\S])*'/
    TEMPLATE: /@TEMPLATE@/
    NUMBER: /(?:0[xXoObB][0-9a-fA-F_]+|(?:\d[\d_]*\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)n?/
    CONTROL.2: /(?<![.\w$])(?:if|while|for|with)(?![\w$])(?!\s*:)/
    KEYWORD.2: /(?:return|typeof|instanceof|in|new|delete|void|throw|case|do|else)(?![\w$])/
    NAME: /#?(?:[^\W\d]|\$)[\w$]*/
    INCDEC.2: /\+\+|--/
    OP: /\.\.\.|>>>=|===|!==|\*\*=|<<=|>>=|>>>|&&=|\|\|=|\?\?=|=>|==|!=|<=|>=|&&|\|\||\?\?|\?\.(?!\d)|\*\*|<<|>>|[-+*%&|^]=|[-+*%=<>!~&|^?:.]/
    COMMA: ","
    SEMI: ";"
    LPAR: "("
    RPAR: ")"
    LSQB: "["
    RSQB: "]"
    LBRACE: "{"
    RBRACE: "}"

    WS: /[\s\ufeff]+/
    %ignore WS
""".replace('@TEMPLATE@', template_pattern())
