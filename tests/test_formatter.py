"""
Unit tests for the bundle grammar and output formatter.
"""
import pytest
from lark import Lark

from modpack.assembler import assemble
from modpack.errors import MalformedBundleError
from modpack.formatter import format_source, get_parser
from modpack.grammar import bundle_grammar
from modpack.registry import ModuleRegistry


class TestBundleGrammar:
    """Tests for tokenizing bundles."""

    @pytest.fixture
    def parser(self):
        return Lark(bundle_grammar, parser='lalr')

    def _types(self, parser, code):
        return [t.type for t in parser.parse(code).scan_values(lambda v: True)]

    def test_regex_after_operator(self, parser):
        """A slash where an operand is expected starts a regex literal."""
        assert self._types(parser, 'x = /a+b/g;') == ['NAME', 'OP', 'REGEX', 'SEMI']

    def test_division_after_operand(self, parser):
        """A slash after an operand is a division."""
        assert self._types(parser, 'x = a / b / c;') == [
            'NAME', 'OP', 'NAME', 'DIV', 'NAME', 'DIV', 'NAME', 'SEMI']

    def test_regex_after_keyword(self, parser):
        """return is followed by an operand, so this is a regex."""
        assert 'REGEX' in self._types(parser, 'return /x/.test(s);')

    def test_division_after_group(self, parser):
        """A closing parenthesis ends an operand."""
        assert 'DIV' in self._types(parser, 'y = (a + b) / 2;')

    def test_comment_between_operand_and_division(self, parser):
        """Comments do not change what a slash means."""
        assert self._types(parser, 'a /* half */ / 2') == ['NAME', 'COMMENT', 'DIV', 'NUMBER']

    def test_keyword_prefix_is_a_name(self, parser):
        """Identifiers that start like keywords are names."""
        assert self._types(parser, 'index returned') == ['NAME', 'NAME']

    def test_increment_operators(self, parser):
        assert self._types(parser, 'i++ + ++j') == ['NAME', 'INCDEC', 'OP', 'INCDEC', 'NAME']

    def test_nested_template_is_one_token(self, parser):
        """Backticks inside ${...} do not end the outer template."""
        code = 's = `x${a ? `y${a}` : "z"}w`;'
        assert self._types(parser, code) == ['NAME', 'OP', 'TEMPLATE', 'SEMI']

    def test_regex_after_if_header(self, parser):
        """An operand is expected after the ) of an if header."""
        types = self._types(parser, 'if (s) /\\(/.test(s) && f();')
        assert types[0] == 'CONTROL'
        assert 'REGEX' in types
        assert 'DIV' not in types

    def test_control_words_as_property_and_key(self, parser):
        """if/for after a dot or before a colon are plain names."""
        assert self._types(parser, 'a.if = {for: 1}') == [
            'NAME', 'OP', 'NAME', 'OP', 'LBRACE', 'NAME', 'OP', 'NUMBER', 'RBRACE']

    def test_brackets_must_balance(self, parser):
        with pytest.raises(Exception):
            parser.parse('f(a, [b)')


class TestFormatSource:
    """Tests for the canonical layout."""

    def test_statements_on_own_lines(self):
        assert format_source('var a=1;var b=2;') == 'var a = 1;\nvar b = 2;\n'

    def test_blocks_are_indented(self):
        source = 'if(a){b()}else{c()}'
        assert format_source(source) == 'if (a) {\n    b()\n} else {\n    c()\n}\n'

    def test_function_argument_block(self):
        source = 'foo(function () { bar(); });'
        assert format_source(source) == 'foo(function() {\n    bar();\n});\n'

    def test_object_literal(self):
        source = 'o = {a: 1, b: -2};'
        assert format_source(source) == 'o = {\n    a: 1, b: -2\n};\n'

    def test_empty_block(self):
        assert format_source('if (!a) {}') == 'if (!a) {}\n'

    def test_ternary_spacing(self):
        assert format_source('x=a?b:c;') == 'x = a ? b : c;\n'

    def test_for_header_stays_on_one_line(self):
        source = 'for(var i=0;i<n;i++){s+=i}'
        assert format_source(source) == 'for (var i = 0; i < n; i++) {\n    s += i\n}\n'

    def test_arrays(self):
        assert format_source('x=[1,2,[3]];') == 'x = [1, 2, [3]];\n'

    def test_division_spacing_preserved(self):
        """Spacing around a division is kept as written."""
        assert format_source('a=b/c;') == 'a = b/c;\n'

    def test_regex_literal_untouched(self):
        source = 'var r = /a\\/b[/]c/gi, d = x / y / z;'
        assert format_source(source) == source + '\n'

    def test_comments_preserved(self):
        source = 'var a = 1; // one\n/* two */\nvar b;'
        assert format_source(source) == 'var a = 1; // one\n/* two */\nvar b;\n'

    def test_blank_lines_collapsed(self):
        assert format_source('a();\n\n\n\nb();') == 'a();\n\nb();\n'

    def test_line_breaks_without_semicolons_kept(self):
        """Statements separated only by newlines stay separate."""
        assert format_source('var a = 1\nvar b = 2') == 'var a = 1\nvar b = 2\n'

    def test_return_line_break_kept(self):
        """A newline after return keeps its meaning."""
        source = 'function f() {\n  return\n  x\n}'
        assert format_source(source) == 'function f() {\n    return\n    x\n}\n'

    def test_strings_and_templates_verbatim(self):
        source = "s = 'it\\'s' + \"q\" + `a\n  b`;"
        assert format_source(source) == source + '\n'

    def test_nested_template_verbatim(self):
        """Templates nested in substitutions are printed exactly as written."""
        source = 'var a = 1;\ns = `x${a ? `y${a}` : "z"}w`;'
        assert format_source(source) == source + '\n'

    def test_template_substitution_with_braces(self):
        source = 't = `a${ {b: "}"}.b }\n  c`;'
        assert format_source(source) == source + '\n'

    def test_template_nesting_limit(self):
        """Nesting deeper than the lexer follows is an error, not a silent split."""
        with pytest.raises(MalformedBundleError):
            format_source('x = `a${`b${`c${`d`}`}`}`;')

    def test_regex_after_if_header(self):
        source = 'if (s) /\\(/.test(s) && f();'
        assert format_source(source) == source + '\n'

    def test_while_and_do_while(self):
        assert format_source('while(x){x--}') == 'while (x) {\n    x--\n}\n'
        assert format_source('do{a()}while(b);') == 'do {\n    a()\n} while (b);\n'

    def test_idempotent_on_bundle(self):
        """Formatting a formatted bundle changes nothing."""
        registry = ModuleRegistry()
        registry.record('a')
        bundle = assemble(
            '//a.js\n_p[0]={\nvalue: function(req, exports){ exports.val = 1 + -x; /* c */ }};',
            registry,
        )
        once = format_source(bundle)
        assert format_source(once) == once

    def test_formatted_module_layout(self):
        source = '//a.js\n_p[0]={\nvalue: function(req, exports){ exports.val = 1; }};'
        assert format_source(source) == (
            '//a.js\n'
            '_p[0] = {\n'
            '    value: function(req, exports) {\n'
            '        exports.val = 1;\n'
            '    }\n'
            '};\n'
        )

    def test_parser_is_shared(self):
        assert get_parser() is get_parser()


class TestMalformedBundles:
    """Tests for parse failures."""

    def test_unbalanced_parenthesis(self):
        with pytest.raises(MalformedBundleError):
            format_source('var a = (1;')

    def test_unterminated_string_reports_line(self):
        with pytest.raises(MalformedBundleError) as exc_info:
            format_source('a = 1;\nvar s = "oops;\n')
        assert exc_info.value.line_number == 2
        assert 'var s = "oops;' in str(exc_info.value)
