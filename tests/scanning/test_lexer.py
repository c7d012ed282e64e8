"""Tests for the context-sensitive scanner."""

import pytest

from dependor.exceptions import ErrorCode
from dependor.scanning import Scanner, TokenKind, significant_tokens, tokenize


def _texts(source, jsx=False):
    return [t.text for t in significant_tokens(tokenize(source, jsx=jsx)) if t.kind is not TokenKind.EOF]


def _kinds(source, jsx=False):
    return [t.kind for t in significant_tokens(tokenize(source, jsx=jsx)) if t.kind is not TokenKind.EOF]


def _codes(source, jsx=False, max_depth=512):
    scanner = Scanner(source, jsx=jsx, max_depth=max_depth)
    list(scanner)
    return [d.code for d in scanner.diagnostics]


SAMPLES = [
    "",
    'import x from "./x";\n',
    "const re = /a\\/b[/]c/gi; const y = a / b / c;",
    "const s = `a${b + `inner${c}`}d`;",
    "/* unterminated",
    '"open string\nnext line',
    "`never closed ${",
    "}}}{{{",
    "a?.5:1",
    "\ufeffexport default 1\r\n",
]


class TestRoundTrip:
    """Concatenated token texts reproduce the input."""

    @pytest.mark.parametrize("source", SAMPLES)
    def test_round_trip(self, source):
        assert "".join(t.text for t in tokenize(source)) == source

    @pytest.mark.parametrize("source", SAMPLES)
    def test_round_trip_jsx(self, source):
        assert "".join(t.text for t in tokenize(source, jsx=True)) == source

    def test_single_eof_at_end(self):
        tokens = list(tokenize("a b"))
        assert tokens[-1].kind is TokenKind.EOF
        assert sum(1 for t in tokens if t.kind is TokenKind.EOF) == 1

    def test_empty_input_yields_eof(self):
        tokens = list(tokenize(""))
        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.EOF

    def test_scanner_is_restartable(self):
        scanner = Scanner("import a from 'b'; /* c */")
        first = list(scanner)
        second = list(scanner.tokens())
        assert first == second


class TestWords:
    """Keywords, identifiers and numbers."""

    def test_keywords_are_classified(self):
        tokens = list(significant_tokens(tokenize("import foo from 'x'")))
        assert tokens[0].kind is TokenKind.KEYWORD
        assert tokens[1].kind is TokenKind.IDENTIFIER
        assert tokens[2].kind is TokenKind.KEYWORD
        assert tokens[3].kind is TokenKind.STRING_LITERAL

    def test_generator_function_is_one_keyword(self):
        tokens = list(significant_tokens(tokenize("function* gen() {}")))
        assert tokens[0].text == "function*"
        assert tokens[0].kind is TokenKind.KEYWORD

    def test_require_is_keyword(self):
        assert _kinds("require('x')")[0] is TokenKind.KEYWORD

    def test_numbers(self):
        assert _kinds("0x1F 1_000 .5 1e3 10n") == [TokenKind.NUMBER] * 5

    def test_conditional_with_decimal_is_not_optional_chain(self):
        assert _texts("a?.5:1") == ["a", "?", ".5", ":", "1"]

    def test_optional_chain(self):
        assert _texts("a?.b") == ["a", "?.", "b"]


class TestRegexVersusDivide:
    """A '/' starts a regex only where an expression is expected."""

    def test_division_chain(self):
        assert TokenKind.REGEX_LITERAL not in _kinds("a / b / c")

    def test_regex_after_assignment(self):
        tokens = list(significant_tokens(tokenize("x = /ab+c/g")))
        assert tokens[2].kind is TokenKind.REGEX_LITERAL
        assert tokens[2].text == "/ab+c/g"

    def test_regex_after_return(self):
        assert TokenKind.REGEX_LITERAL in _kinds("return /re/")

    def test_division_after_paren(self):
        assert TokenKind.REGEX_LITERAL not in _kinds("(a) / 2")

    @pytest.mark.parametrize("source", ["opts.default / 2 / x", "x?.type / 2 / y", "mod.from / 2 / z"])
    def test_division_after_keyword_property(self, source):
        assert TokenKind.REGEX_LITERAL not in _kinds(source)

    def test_regex_after_bare_keyword(self):
        assert TokenKind.REGEX_LITERAL in _kinds("export default /re/")

    def test_slash_inside_class(self):
        assert _texts("/[/]/") == ["/[/]/"]

    def test_regex_hides_quotes(self):
        assert _kinds("x = /'/; y") == [
            TokenKind.IDENTIFIER,
            TokenKind.PUNCTUATOR,
            TokenKind.REGEX_LITERAL,
            TokenKind.PUNCTUATOR,
            TokenKind.IDENTIFIER,
        ]


class TestCommentsAndStrings:
    """Comments and strings hide the words inside them."""

    def test_line_comment(self):
        tokens = list(tokenize('// import x from "y"\nz'))
        assert tokens[0].kind is TokenKind.LINE_COMMENT
        assert not any(t.kind is TokenKind.KEYWORD for t in tokens)

    def test_block_comment(self):
        tokens = list(tokenize('/* require("x") */ z'))
        assert tokens[0].kind is TokenKind.BLOCK_COMMENT

    def test_string_with_escape(self):
        assert _texts(r'"a\"b" c') == [r'"a\"b"', "c"]

    def test_keyword_inside_string(self):
        assert _kinds('"import"') == [TokenKind.STRING_LITERAL]


class TestTemplates:
    """Template literal spans and interpolations."""

    def test_simple_interpolation(self):
        assert _texts("`a${b}c`") == ["`a", "${", "b", "}", "c`"]

    def test_interpolation_kinds(self):
        assert _kinds("`a${b}c`") == [
            TokenKind.TEMPLATE_LITERAL_SPAN,
            TokenKind.TEMPLATE_EXPR_START,
            TokenKind.IDENTIFIER,
            TokenKind.TEMPLATE_EXPR_END,
            TokenKind.TEMPLATE_LITERAL_SPAN,
        ]

    def test_no_substitution_template(self):
        assert _texts("`plain`") == ["`plain`"]

    def test_nested_template(self):
        texts = _texts("`a${`b${c}`}d`")
        assert texts == ["`a", "${", "`b", "${", "c", "}", "`", "}", "d`"]

    def test_braces_inside_interpolation(self):
        assert _texts("`${{a:1}.a}`") == ["`", "${", "{", "a", ":", "1", "}", ".", "a", "}", "`"]

    def test_template_hides_import(self):
        assert TokenKind.KEYWORD not in _kinds("`import x from 'y'`")


class TestMalformedInput:
    """Malformed spans become diagnostics, never exceptions."""

    def test_unterminated_string(self):
        source = 'x = "abc\nconst y = 1;'
        assert _codes(source) == [ErrorCode.DP100]
        tokens = list(significant_tokens(tokenize(source)))
        assert tokens[2].kind is TokenKind.PUNCTUATOR
        assert tokens[2].text == '"abc'
        assert tokens[3].text == "const"

    def test_unterminated_block_comment(self):
        assert _codes("a /* never closed") == [ErrorCode.DP103]

    def test_unterminated_template(self):
        tokens = list(significant_tokens(tokenize("`abc")))
        assert tokens[0].kind is TokenKind.PUNCTUATOR
        assert tokens[0].text == "`abc"
        assert _codes("`abc") == [ErrorCode.DP101]

    def test_unterminated_regex(self):
        source = "x = /abc\ny"
        assert _codes(source) == [ErrorCode.DP102]
        assert _texts(source)[-1] == "y"

    def test_unbalanced_brace(self):
        assert _codes("a }") == [ErrorCode.DP105]

    def test_unclosed_brace_at_eof_is_not_reported(self):
        assert _codes("function f() {") == []

    def test_diagnostic_position(self):
        scanner = Scanner('a\n  "oops', path="src/a.js")
        list(scanner)
        [diag] = scanner.diagnostics
        assert (diag.path, diag.line, diag.column) == ("src/a.js", 2, 3)

    @pytest.mark.parametrize(
        "source",
        ["\\", "'", "`${", "/", "<", "<<<>>>", "}`", "${}", "\x00\x01", "a?.", "0x", "`${`${"],
    )
    def test_junk_never_raises(self, source):
        tokens = list(tokenize(source, jsx=True))
        assert tokens[-1].kind is TokenKind.EOF
        assert "".join(t.text for t in tokens) == source


class TestPositions:
    """Line and column tracking."""

    def test_line_and_column(self):
        tokens = list(significant_tokens(tokenize("a\n  b")))
        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_multiline_token_advances_line(self):
        tokens = list(significant_tokens(tokenize("/* x\ny */ z")))
        assert tokens[-2].text == "z"
        assert tokens[-2].line == 2


class TestAngleBrackets:
    """Generics, JSX and comparisons."""

    def test_nested_generic_closers_are_split(self):
        texts = _texts("const m: Map<string, Array<number>> = new Map();")
        assert ">>" not in texts
        assert texts.count(">") == 2

    def test_comparison_stays_punctuator(self):
        assert _texts("a < b") == ["a", "<", "b"]

    def test_shift_outside_generics(self):
        assert ">>" in _texts("x = a >> 2")

    def test_jsx_text_hides_quotes_and_words(self):
        tokens = list(significant_tokens(tokenize('<p>Don\'t import "x"</p>', jsx=True)))
        jsx_text = [t for t in tokens if t.kind is TokenKind.JSX_TEXT]
        assert len(jsx_text) == 1
        assert jsx_text[0].text == 'Don\'t import "x"'
        assert TokenKind.KEYWORD not in [t.kind for t in tokens]

    def test_fragment(self):
        scanner = Scanner("const f = <>hi</>;", jsx=True)
        kinds = [t.kind for t in scanner]
        assert TokenKind.JSX_TEXT in kinds
        assert scanner.diagnostics == []

    def test_self_closing_tag_then_division(self):
        source = "const el = <Foo bar={x} />; const r = a / b;"
        kinds = _kinds(source, jsx=True)
        assert TokenKind.REGEX_LITERAL not in kinds
        assert TokenKind.JSX_TEXT not in kinds

    def test_jsx_expression_container(self):
        source = '<div>{require("./x")}</div>'
        texts = _texts(source, jsx=True)
        assert "require" in texts
        assert '"./x"' in texts

    def test_jsx_disabled(self):
        kinds = _kinds("const x = <div>text</div>;")
        assert TokenKind.JSX_TEXT not in kinds

    def test_arrow_generic_is_not_jsx(self):
        scanner = Scanner("const f = <T,>(x: T) => x;", jsx=True)
        kinds = [t.kind for t in scanner]
        assert TokenKind.JSX_TEXT not in kinds
        assert scanner.diagnostics == []


class TestNestingCap:
    """The mode stack is bounded."""

    def test_deep_nesting_is_abandoned(self):
        codes = _codes("`${" * 20, max_depth=8)
        assert ErrorCode.DP104 in codes

    def test_shallow_nesting_within_cap(self):
        assert _codes("`${`${`${a}`}`}`", max_depth=8) == []
