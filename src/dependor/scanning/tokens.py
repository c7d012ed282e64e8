"""Token kinds, lexer modes and the token record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    IDENTIFIER = "Identifier"
    KEYWORD = "Keyword"
    STRING_LITERAL = "StringLiteral"
    TEMPLATE_LITERAL_SPAN = "TemplateLiteralSpan"  # literal chunk, delimiters included
    TEMPLATE_EXPR_START = "TemplateExprStart"  # ${
    TEMPLATE_EXPR_END = "TemplateExprEnd"  # } closing an interpolation
    REGEX_LITERAL = "RegexLiteral"
    LINE_COMMENT = "LineComment"
    BLOCK_COMMENT = "BlockComment"
    PUNCTUATOR = "Punctuator"
    NUMBER = "Number"
    WHITESPACE = "Whitespace"
    JSX_TEXT = "JsxText"
    EOF = "EOF"


class LexMode(Enum):
    """Scanner mode frames kept on the mode stack."""

    NORMAL = "Normal"
    TEMPLATE = "Template"
    JSX_TEXT = "JsxText"
    JSX_TAG = "JsxTag"


# The closed keyword set. Everything else that looks like a word is an
# Identifier, including reserved words the extractor does not care about.
KEYWORDS = frozenset(
    {
        "import",
        "export",
        "from",
        "as",
        "default",
        "type",
        "function",
        "class",
        "const",
        "let",
        "var",
        "async",
        "function*",
        "require",
        "interface",
    }
)

# Words after which an expression is expected, so a following "/" starts a
# regex and a following "<" may start JSX.
EXPRESSION_KEYWORDS = frozenset(
    {
        "return",
        "typeof",
        "instanceof",
        "in",
        "of",
        "new",
        "delete",
        "void",
        "throw",
        "case",
        "do",
        "else",
        "yield",
        "await",
    }
)

# Kinds that never influence lexical context.
TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT})

# Operator and punctuation spellings, longest first so a greedy match wins.
PUNCTUATORS = (
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
    ">>",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    "<",
    ">",
    ",",
    ";",
    ".",
    "*",
    "+",
    "-",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
    "@",
    "#",
)


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    ``text`` is the exact source span, so joining every token's text in
    order reproduces the input.
    """

    kind: TokenKind
    text: str
    start_offset: int
    end_offset: int
    line: int
    column: int

    @property
    def is_trivia(self) -> bool:
        return self.kind in TRIVIA

    def is_punct(self, *texts: str) -> bool:
        return self.kind is TokenKind.PUNCTUATOR and self.text in texts

    def is_keyword(self, *texts: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.text in texts

    @property
    def is_name(self) -> bool:
        """True for identifiers and keywords, which are both usable as names."""
        return self.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.text!r}, {self.line}:{self.column})"
