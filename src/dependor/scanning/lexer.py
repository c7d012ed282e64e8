"""Context-sensitive JavaScript/TypeScript scanner.

Turns source text into a lazy stream of classified tokens without parsing.
The grammar's lexical ambiguities are settled by a small mode stack plus
the previous significant token:

    - "/" begins a regex unless the previous significant token can end an
      expression (identifier, literal, closing bracket).
    - "<" opens a type-argument list after a name in type position when a
      matching ">" can be found, opens a JSX tag in expression position for
      JSX-enabled files, and is a comparison operator otherwise.
    - "`" pushes a Template frame; "${" pushes a Normal frame whose
      depth-zero "}" pops back into the template.

The scanner never raises. Malformed spans (unterminated strings, regexes,
templates, comments) are emitted as opaque Punctuator runs, recorded as
diagnostics, and scanning resumes at the next line (single-line
constructs) or ends at EOF (multi-line constructs).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from ..exceptions.taxonomy import Diagnostic, ErrorCode
from ..logging_config import get_logger, log_diagnostic
from .tokens import EXPRESSION_KEYWORDS, KEYWORDS, PUNCTUATORS, LexMode, Token, TokenKind

logger = get_logger(__name__)

_WHITESPACE_RE = re.compile(r"[\s\ufeff]+")
_IDENT_RE = re.compile(r"(?:[^\W\d]|\$)[\w$\u200c\u200d]*")
_JSX_NAME_RE = re.compile(r"(?:[^\W\d]|\$)[\w$\-:.]*")
_NUMBER_RE = re.compile(
    r"0[xX][\da-fA-F_]*n?"
    r"|0[oO][0-7_]*n?"
    r"|0[bB][01_]*n?"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?[\d_]+)?n?"
)
_PUNCT_RE = re.compile("|".join(re.escape(p) for p in PUNCTUATORS))
_REGEX_FLAGS_RE = re.compile(r"[A-Za-z]*")
# `<T,>` and `<T extends U>` are arrow-function generics even in .tsx files
_ARROW_GENERIC_RE = re.compile(r"<\s*(?:[^\W\d]|\$)[\w$]*\s*(?:,|extends\b)")

_LINE_BREAKS = "\n\r\u2028\u2029"

# Previous tokens after which a name chain is in type position.
_TYPE_POSITION_PUNCT = frozenset({":"})
_TYPE_POSITION_WORDS = frozenset(
    {"class", "interface", "type", "function", "function*", "extends", "implements", "new", "as"}
)

# Upper bound on the characters examined when looking for a closing ">".
_GENERIC_LOOKAHEAD = 2000
_HISTORY = 16


@dataclass
class _Frame:
    """One entry on the mode stack.

    Normal frames pushed by a template interpolation or a JSX expression
    container remember their owner so that the depth-zero "}" returns there.
    """

    mode: LexMode
    owner: Optional[LexMode] = None
    brace_depth: int = 0
    generic_depth: int = 0
    fresh: bool = True  # Template: opening backtick not yet consumed
    closing: bool = False  # JsxTag: </...>
    self_closing: bool = False  # JsxTag: <.../>
    seen_content: bool = False  # JsxTag: any non-trivia after "<"


class Scanner:
    """Lazy tokenizer for one source file.

    Iterating a Scanner (or calling ``tokens()``) restarts from the first
    character, so the same instance can be consumed more than once.

    Args:
        text: Decoded source text
        jsx: Whether JSX syntax is permitted (.jsx/.tsx and plain .js)
        path: Source path, used only for diagnostics
        max_depth: Mode stack cap; deeper nesting abandons the rest of the file
    """

    def __init__(self, text: str, jsx: bool = False, path: str = "", max_depth: int = 512):
        self.text = text
        self.jsx = jsx
        self.path = path
        self.max_depth = max_depth
        self.diagnostics: list[Diagnostic] = []
        self._reset()

    def __iter__(self) -> Iterator[Token]:
        return self.tokens()

    def _reset(self) -> None:
        self._pos = 0
        self._len = len(self.text)
        self._line = 1
        self._line_start = 0
        self._stack: list[_Frame] = [_Frame(LexMode.NORMAL)]
        self._history: list[Token] = []
        self.diagnostics = []

    # ── Public API ─────────────────────────────────────────────

    def tokens(self) -> Iterator[Token]:
        """Yield every token, trivia included, ending with a single EOF."""
        self._reset()
        while self._pos < self._len:
            token = self._next_token()
            if not token.is_trivia:
                self._history.append(token)
                if len(self._history) > _HISTORY:
                    del self._history[0]
            yield token
        if len(self._stack) > 1:
            modes = ", ".join(f.mode.value for f in self._stack[1:])
            self._diagnose(ErrorCode.DP105, f"unclosed constructs at end of file ({modes})")
        yield self._make(TokenKind.EOF, self._len, self._len)

    @property
    def mode(self) -> LexMode:
        """Mode of the innermost frame."""
        return self._stack[-1].mode

    # ── Dispatch ───────────────────────────────────────────────

    def _next_token(self) -> Token:
        frame = self._stack[-1]
        if frame.mode is LexMode.TEMPLATE:
            return self._scan_template(frame)
        if frame.mode is LexMode.JSX_TAG:
            return self._scan_jsx_tag(frame)
        if frame.mode is LexMode.JSX_TEXT:
            return self._scan_jsx_text()
        return self._scan_normal(frame)

    def _scan_normal(self, frame: _Frame) -> Token:
        text, pos = self.text, self._pos
        ch = text[pos]

        m = _WHITESPACE_RE.match(text, pos)
        if m:
            return self._make(TokenKind.WHITESPACE, pos, m.end())

        if ch == "/":
            nxt = text[pos + 1 : pos + 2]
            if nxt == "/":
                return self._scan_line_comment(pos)
            if nxt == "*":
                return self._scan_block_comment(pos)
            if not self._expression_ended():
                return self._scan_regex(pos)
            return self._scan_punctuator(pos)

        if ch == "'" or ch == '"':
            return self._scan_string(pos, ch)

        if ch == "`":
            if not self._push(_Frame(LexMode.TEMPLATE)):
                return self._abandon(pos)
            return self._scan_template(self._stack[-1])

        if ch == "{":
            frame.brace_depth += 1
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        if ch == "}":
            return self._close_brace(frame, pos)

        if ch == "<":
            return self._scan_less_than(frame, pos)

        if ch == ">" and frame.generic_depth > 0:
            frame.generic_depth -= 1
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        m = _IDENT_RE.match(text, pos)
        if m:
            return self._word(pos, m.end())

        if ch.isdigit() or (ch == "." and text[pos + 1 : pos + 2].isdigit()):
            m = _NUMBER_RE.match(text, pos)
            if m and m.end() > pos:
                return self._make(TokenKind.NUMBER, pos, m.end())

        return self._scan_punctuator(pos)

    # ── Words, numbers, punctuators ────────────────────────────

    def _word(self, start: int, end: int) -> Token:
        word = self.text[start:end]
        if word == "function" and self.text[end : end + 1] == "*":
            return self._make(TokenKind.KEYWORD, start, end + 1)
        if word in KEYWORDS:
            return self._make(TokenKind.KEYWORD, start, end)
        return self._make(TokenKind.IDENTIFIER, start, end)

    def _scan_punctuator(self, pos: int) -> Token:
        m = _PUNCT_RE.match(self.text, pos)
        if not m:
            # Unknown character: opaque single-character run
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)
        end = m.end()
        if m.group() == "?." and self.text[end : end + 1].isdigit():
            end = pos + 1  # `a ?.5 : b` is a conditional
        return self._make(TokenKind.PUNCTUATOR, pos, end)

    def _close_brace(self, frame: _Frame, pos: int) -> Token:
        if frame.brace_depth > 0:
            frame.brace_depth -= 1
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)
        if frame.owner is LexMode.TEMPLATE:
            self._stack.pop()
            return self._make(TokenKind.TEMPLATE_EXPR_END, pos, pos + 1)
        if frame.owner is not None:
            # End of a JSX expression container
            self._stack.pop()
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)
        self._diagnose(ErrorCode.DP105, "unbalanced '}'", pos)
        return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

    # ── Comments, strings, regexes ─────────────────────────────

    def _scan_line_comment(self, pos: int) -> Token:
        end = self._line_end(pos)
        return self._make(TokenKind.LINE_COMMENT, pos, end)

    def _scan_block_comment(self, pos: int) -> Token:
        close = self.text.find("*/", pos + 2)
        if close < 0:
            self._diagnose(ErrorCode.DP103, "unterminated block comment", pos)
            return self._make(TokenKind.PUNCTUATOR, pos, self._len)
        return self._make(TokenKind.BLOCK_COMMENT, pos, close + 2)

    def _scan_string(self, pos: int, quote: str) -> Token:
        text, i = self.text, pos + 1
        while i < self._len:
            ch = text[i]
            if ch == quote:
                return self._make(TokenKind.STRING_LITERAL, pos, i + 1)
            if ch == "\\":
                # Escapes, including line continuations (\ + CRLF)
                i += 3 if text.startswith("\r\n", i + 1) else 2
                continue
            if ch in "\n\r":
                break
            i += 1
        end = min(i, self._len)
        self._diagnose(ErrorCode.DP100, "unterminated string literal", pos)
        return self._make(TokenKind.PUNCTUATOR, pos, end)

    def _scan_regex(self, pos: int) -> Token:
        text, i = self.text, pos + 1
        in_class = False
        while i < self._len:
            ch = text[i]
            if ch in _LINE_BREAKS:
                break
            if ch == "\\":
                if text[i + 1 : i + 2] in ("", "\n", "\r"):
                    i += 1
                    break
                i += 2
                continue
            if in_class:
                if ch == "]":
                    in_class = False
            elif ch == "[":
                in_class = True
            elif ch == "/":
                flags = _REGEX_FLAGS_RE.match(text, i + 1)
                return self._make(TokenKind.REGEX_LITERAL, pos, flags.end())
            i += 1
        end = min(i, self._len)
        self._diagnose(ErrorCode.DP102, "unterminated regex literal", pos)
        return self._make(TokenKind.PUNCTUATOR, pos, end)

    # ── Template literals ──────────────────────────────────────

    def _scan_template(self, frame: _Frame) -> Token:
        text, start = self.text, self._pos
        i = start
        if frame.fresh:
            frame.fresh = False
            i += 1
        elif text.startswith("${", i):
            if not self._push(_Frame(LexMode.NORMAL, owner=LexMode.TEMPLATE)):
                return self._abandon(start)
            return self._make(TokenKind.TEMPLATE_EXPR_START, i, i + 2)

        while i < self._len:
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == "`":
                self._stack.pop()
                return self._make(TokenKind.TEMPLATE_LITERAL_SPAN, start, i + 1)
            if ch == "$" and text.startswith("${", i):
                return self._make(TokenKind.TEMPLATE_LITERAL_SPAN, start, i)
            i += 1

        self._diagnose(ErrorCode.DP101, "unterminated template literal", start)
        del self._stack[1:]
        return self._make(TokenKind.PUNCTUATOR, start, self._len)

    # ── "<": generics, JSX, comparison ─────────────────────────

    def _scan_less_than(self, frame: _Frame, pos: int) -> Token:
        if frame.generic_depth > 0:
            frame.generic_depth += 1
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        if self._in_type_position() and self._closing_angle_ahead(pos):
            frame.generic_depth = 1
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        if self.jsx and not self._expression_ended() and self._jsx_tag_ahead(pos):
            if not self._push(_Frame(LexMode.JSX_TAG)):
                return self._abandon(pos)
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        return self._scan_punctuator(pos)

    def _in_type_position(self) -> bool:
        """True when the previous tokens are a (dotted) name in type position."""
        history = self._history
        idx = len(history) - 1
        if idx < 0 or not self._is_type_name(history[idx]):
            return False
        while idx >= 2 and history[idx - 1].is_punct(".") and history[idx - 2].is_name:
            idx -= 2
        if idx == 0:
            return False
        before = history[idx - 1]
        if before.kind is TokenKind.PUNCTUATOR:
            return before.text in _TYPE_POSITION_PUNCT
        return before.is_name and before.text in _TYPE_POSITION_WORDS

    @staticmethod
    def _is_type_name(token: Token) -> bool:
        if token.kind is TokenKind.IDENTIFIER:
            return token.text not in EXPRESSION_KEYWORDS
        return False

    def _closing_angle_ahead(self, pos: int) -> bool:
        """Look for the ">" matching the "<" at ``pos`` with bracket tracking.

        "=>" inside the list (function types) is skipped and ">>" counts as
        two closers. Statement-level punctuation or a mismatched bracket
        means this "<" is not a type-argument list.
        """
        text = self.text
        limit = min(self._len, pos + _GENERIC_LOOKAHEAD)
        angle = 1
        brackets: list[str] = []
        pairs = {")": "(", "]": "[", "}": "{"}
        i = pos + 1
        while i < limit:
            ch = text[i]
            if ch in "'\"":
                close = text.find(ch, i + 1)
                if close < 0:
                    return False
                i = close + 1
                continue
            if ch == ";":
                return False
            if ch == "=":
                nxt = text[i + 1 : i + 2]
                if nxt == ">":
                    i += 2
                    continue
                if nxt == "=":
                    return False
            elif ch in "&|" and text[i + 1 : i + 2] == ch:
                return False
            elif ch in "([{":
                brackets.append(ch)
            elif ch in ")]}":
                if not brackets or brackets.pop() != pairs[ch]:
                    return False
            elif ch == "<":
                angle += 1
            elif ch == ">":
                angle -= 1
                if angle == 0:
                    return not brackets
            i += 1
        return False

    def _jsx_tag_ahead(self, pos: int) -> bool:
        nxt = self.text[pos + 1 : pos + 2]
        if nxt == ">":
            return True  # fragment
        if not nxt or not (nxt.isalpha() or nxt in "_$"):
            return False
        return not _ARROW_GENERIC_RE.match(self.text, pos)

    # ── JSX ────────────────────────────────────────────────────

    def _scan_jsx_tag(self, frame: _Frame) -> Token:
        text, pos = self.text, self._pos
        ch = text[pos]

        m = _WHITESPACE_RE.match(text, pos)
        if m:
            return self._make(TokenKind.WHITESPACE, pos, m.end())

        if ch == "/":
            nxt = text[pos + 1 : pos + 2]
            if nxt == "/":
                return self._scan_line_comment(pos)
            if nxt == "*":
                return self._scan_block_comment(pos)
            if frame.seen_content:
                frame.self_closing = True
            else:
                frame.closing = True
            frame.seen_content = True
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        frame.seen_content = True

        if ch == ">":
            self._stack.pop()
            if frame.closing:
                if self._stack[-1].mode is LexMode.JSX_TEXT:
                    self._stack.pop()
            elif not frame.self_closing:
                if not self._push(_Frame(LexMode.JSX_TEXT)):
                    return self._abandon(pos)
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        if ch == "{":
            if not self._push(_Frame(LexMode.NORMAL, owner=LexMode.JSX_TAG)):
                return self._abandon(pos)
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

        if ch == "'" or ch == '"':
            # JSX attribute strings have no escapes and may span lines
            close = text.find(ch, pos + 1)
            if close < 0:
                self._diagnose(ErrorCode.DP100, "unterminated JSX attribute string", pos)
                return self._make(TokenKind.PUNCTUATOR, pos, self._len)
            return self._make(TokenKind.STRING_LITERAL, pos, close + 1)

        m = _JSX_NAME_RE.match(text, pos)
        if m:
            return self._make(TokenKind.IDENTIFIER, pos, m.end())

        return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)

    def _scan_jsx_text(self) -> Token:
        text, pos = self.text, self._pos
        ch = text[pos]
        if ch == "<":
            if not self._push(_Frame(LexMode.JSX_TAG)):
                return self._abandon(pos)
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)
        if ch == "{":
            if not self._push(_Frame(LexMode.NORMAL, owner=LexMode.JSX_TEXT)):
                return self._abandon(pos)
            return self._make(TokenKind.PUNCTUATOR, pos, pos + 1)
        end = pos + 1
        while end < self._len and text[end] not in "<{":
            end += 1
        return self._make(TokenKind.JSX_TEXT, pos, end)

    # ── Context helpers ────────────────────────────────────────

    def _expression_ended(self) -> bool:
        """Whether the previous significant token can end an expression."""
        if not self._history:
            return False
        prev = self._history[-1]
        kind = prev.kind
        if kind is TokenKind.IDENTIFIER:
            return prev.text not in EXPRESSION_KEYWORDS
        if kind is TokenKind.KEYWORD:
            # `opts.default`, `x?.type`: a property name, not a keyword
            return len(self._history) > 1 and self._history[-2].is_punct(".", "?.")
        if kind in (
            TokenKind.STRING_LITERAL,
            TokenKind.NUMBER,
            TokenKind.REGEX_LITERAL,
            TokenKind.TEMPLATE_LITERAL_SPAN,
        ):
            return True
        if kind is TokenKind.PUNCTUATOR:
            return prev.text in (")", "]", "}")
        return False

    def _push(self, frame: _Frame) -> bool:
        if len(self._stack) >= self.max_depth:
            return False
        self._stack.append(frame)
        return True

    def _abandon(self, pos: int) -> Token:
        """Emit the rest of the file as one opaque run after hitting the depth cap."""
        self._diagnose(
            ErrorCode.DP104, f"nesting deeper than {self.max_depth} frames; rest of file skipped", pos
        )
        del self._stack[1:]
        return self._make(TokenKind.PUNCTUATOR, pos, self._len)

    def _line_end(self, pos: int) -> int:
        end = pos
        while end < self._len and self.text[end] not in _LINE_BREAKS:
            end += 1
        return end

    def _diagnose(self, code: ErrorCode, message: str, pos: Optional[int] = None) -> None:
        if pos is None:
            line, column = 0, 0
        else:
            line = self.text.count("\n", 0, pos) + 1
            column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        diagnostic = Diagnostic(code, message, self.path, line, column)
        self.diagnostics.append(diagnostic)
        log_diagnostic(logger, diagnostic)

    def _make(self, kind: TokenKind, start: int, end: int) -> Token:
        token = Token(
            kind=kind,
            text=self.text[start:end],
            start_offset=start,
            end_offset=end,
            line=self._line,
            column=start - self._line_start + 1,
        )
        newlines = self.text.count("\n", start, end)
        if newlines:
            self._line += newlines
            self._line_start = self.text.rfind("\n", start, end) + 1
        self._pos = end
        return token


def tokenize(text: str, jsx: bool = False, path: str = "", max_depth: int = 512) -> Iterator[Token]:
    """Convenience wrapper: lazily tokenize ``text``."""
    return Scanner(text, jsx=jsx, path=path, max_depth=max_depth).tokens()


def significant_tokens(tokens: Iterator[Token]) -> Iterator[Token]:
    """Drop whitespace and comments from a token stream."""
    return (t for t in tokens if not t.is_trivia)
