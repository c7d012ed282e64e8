"""Statement extraction over the scanner's token stream.

The extractor walks significant tokens strictly forward, recognising the
module-system productions (static imports, exports and re-exports,
``require()`` and dynamic ``import()``) and recording a
``DependencyStatement`` for each. It never parses general expressions:
everything it does not recognise is stepped over one token at a time, and
a statement it cannot finish is dropped with a diagnostic while scanning
resumes at the offending token.
"""

from __future__ import annotations

import re
from collections import deque
from typing import Iterable, Iterator, Optional

from ..exceptions.taxonomy import Diagnostic, ErrorCode
from ..logging_config import get_logger, log_diagnostic
from .lexer import Scanner
from .statements import (
    DependencyStatement,
    FileDependencies,
    ImportedName,
    SourceRange,
    StatementKind,
)
from .tokens import EXPRESSION_KEYWORDS, Token, TokenKind

logger = get_logger(__name__)

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset({")", "]", "}"})

# Words that introduce an exported declaration (after optional modifiers).
_DECLARATION_WORDS = frozenset({"function", "function*", "class", "interface", "enum", "namespace", "module"})
_TYPE_DECLARATION_WORDS = frozenset({"interface", "type"})
_MODIFIERS = frozenset({"declare", "abstract", "async"})

# Identifiers that continue an expression across a line break.
_CONTINUATION_WORDS = frozenset({"instanceof", "in", "as", "satisfies", "of"})


def _unquote(text: str) -> str:
    """Strip the delimiters of a string or no-substitution template literal."""
    return _ESCAPE_RE.sub(r"\1", text[1:-1])


def _is_literal_string(token: Token) -> bool:
    if token.kind is TokenKind.STRING_LITERAL:
        return True
    return (
        token.kind is TokenKind.TEMPLATE_LITERAL_SPAN
        and len(token.text) >= 2
        and token.text[0] == "`"
        and token.text[-1] == "`"
    )


def _ends_expression(token: Token) -> bool:
    if token.kind is TokenKind.IDENTIFIER:
        return token.text not in EXPRESSION_KEYWORDS
    if token.kind in (
        TokenKind.STRING_LITERAL,
        TokenKind.NUMBER,
        TokenKind.REGEX_LITERAL,
        TokenKind.TEMPLATE_LITERAL_SPAN,
    ):
        return True
    return token.is_punct(")", "]", "}")


class _Abort(Exception):
    """Raised inside a production to drop the statement being recognised."""

    def __init__(self, code: ErrorCode, message: str, token: Token):
        super().__init__(message)
        self.code = code
        self.token = token


class StatementExtractor:
    """Recognise dependency statements in one file's token stream.

    Args:
        tokens: Token stream (trivia is ignored), normally a ``Scanner``
        path: Source path recorded on every statement
        max_depth: Cap on nested destructuring patterns
    """

    def __init__(self, tokens: Iterable[Token], path: str = "", max_depth: int = 512):
        self.path = path
        self.max_depth = max_depth
        self._tokens: Iterator[Token] = (t for t in tokens if not t.is_trivia)
        self._buffer: deque[Token] = deque()
        self._prev: Optional[Token] = None
        self._eof: Optional[Token] = None
        self.result = FileDependencies(path=path)

    # ── Cursor ─────────────────────────────────────────────────

    def _peek(self, ahead: int = 0) -> Token:
        while len(self._buffer) <= ahead:
            if self._eof is not None:
                return self._eof
            token = next(self._tokens, None)
            if token is None or token.kind is TokenKind.EOF:
                end = self._prev.end_offset if self._prev else 0
                self._eof = token or Token(TokenKind.EOF, "", end, end, 0, 0)
                return self._eof
            self._buffer.append(token)
        return self._buffer[ahead]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.EOF:
            self._buffer.popleft()
            self._prev = token
        return token

    def _expect_keyword(self, text: str) -> Token:
        token = self._peek()
        if not token.is_keyword(text):
            raise _Abort(ErrorCode.DP201, f"expected '{text}', found {token.text!r}", token)
        return self._advance()

    def _expect_specifier(self) -> str:
        token = self._peek()
        if token.kind is not TokenKind.STRING_LITERAL:
            raise _Abort(ErrorCode.DP201, f"expected module specifier, found {token.text!r}", token)
        self._advance()
        return _unquote(token.text)

    def _expect_name(self) -> str:
        token = self._peek()
        if token.kind is TokenKind.STRING_LITERAL:
            raise _Abort(ErrorCode.DP200, "string-literal binding names are not supported", token)
        if not token.is_name:
            raise _Abort(ErrorCode.DP201, f"expected a name, found {token.text!r}", token)
        return self._advance().text

    def _after_member_access(self) -> bool:
        return self._prev is not None and self._prev.is_punct(".", "?.")

    # ── Driver ─────────────────────────────────────────────────

    def extract(self) -> FileDependencies:
        """Consume the whole stream and return the file's dependencies."""
        while True:
            token = self._peek()
            if token.kind is TokenKind.EOF:
                break
            if not self._statement_at(token):
                self._advance()
        return self.result

    def _statement_at(self, token: Token) -> bool:
        """Dispatch a statement if ``token`` starts one; return whether it did."""
        if token.kind is not TokenKind.KEYWORD or self._after_member_access():
            return False
        if self._peek(1).is_punct(":"):
            return False  # object key such as `{ import: x }`
        if token.text == "import":
            self._guarded(self._import_statement)
            return True
        if token.text == "export":
            self._guarded(self._export_statement)
            return True
        if token.text == "require":
            self._guarded(self._require_call)
            return True
        return False

    def _guarded(self, production) -> None:
        try:
            production()
        except _Abort as e:
            self._diagnose(e.code, str(e), e.token)

    # ── Emission ───────────────────────────────────────────────

    def _statement(
        self, kind: StatementKind, start: Token, specifier: Optional[str] = None, **fields
    ) -> DependencyStatement:
        end = self._prev.end_offset if self._prev is not None else start.end_offset
        return DependencyStatement(
            kind=kind,
            specifier=specifier,
            source_file=self.path,
            range=SourceRange(start.start_offset, end, start.line, start.column),
            **fields,
        )

    def _emit(self, statement: DependencyStatement, at: Optional[int] = None) -> None:
        if at is None:
            self.result.statements.append(statement)
        else:
            self.result.statements.insert(at, statement)

    def _export_names(self, names: Iterable[str]) -> None:
        self.result.exported_symbols.update(names)

    def _diagnose(self, code: ErrorCode, message: str, token: Token) -> None:
        diagnostic = Diagnostic(code, message, self.path, token.line, token.column)
        self.result.diagnostics.append(diagnostic)
        log_diagnostic(logger, diagnostic)

    # ── import ─────────────────────────────────────────────────

    def _import_statement(self) -> None:
        start = self._advance()
        token = self._peek()

        if token.is_punct("("):
            self._advance()
            self._call_arguments(start, StatementKind.DYNAMIC_IMPORT)
            return
        if token.is_punct("."):
            return  # import.meta

        if token.kind is TokenKind.STRING_LITERAL:
            specifier = self._expect_specifier()
            self._emit(self._statement(StatementKind.STATIC_IMPORT, start, specifier))
            return

        type_only = False
        if token.is_keyword("type") and not (
            self._peek(1).is_keyword("from") or self._peek(1).is_punct(",", "=")
        ):
            self._advance()
            type_only = True
            token = self._peek()

        names: list[ImportedName] = []
        is_default = is_namespace = False

        if token.is_name and not token.is_keyword("from"):
            if self._peek(1).is_punct("="):
                # `import x = require("m")`: the require is picked up next
                self._advance()
                self._advance()
                return
            names.append(ImportedName("default", alias=self._advance().text))
            is_default = True
            if self._peek().is_punct(","):
                self._advance()
            token = self._peek()
        elif token.is_keyword("from") and self._peek(1).is_keyword("from"):
            # `import from from "m"`: a default import named "from"
            names.append(ImportedName("default", alias=self._advance().text))
            is_default = True
            token = self._peek()

        if token.is_punct("*"):
            self._advance()
            self._expect_keyword("as")
            names.append(ImportedName("*", alias=self._expect_name()))
            is_namespace = True
        elif token.is_punct("{"):
            names.extend(self._binding_list(allow_string_names=True))

        if not names:
            raise _Abort(ErrorCode.DP201, f"unexpected token {token.text!r} in import", token)

        self._expect_keyword("from")
        specifier = self._expect_specifier()
        self._emit(
            self._statement(
                StatementKind.STATIC_IMPORT,
                start,
                specifier,
                is_type_only=type_only,
                is_default=is_default,
                is_namespace=is_namespace,
                imported_names=tuple(names),
            )
        )

    def _binding_list(self, allow_string_names: bool) -> list[ImportedName]:
        """Parse ``{ a, b as c, type T, "x" as y }``; the cursor is on ``{``."""
        self._advance()
        names: list[ImportedName] = []
        while True:
            token = self._peek()
            if token.is_punct("}"):
                self._advance()
                return names
            if token.is_punct(","):
                self._advance()
                continue
            if token.kind is TokenKind.EOF:
                raise _Abort(ErrorCode.DP201, "unterminated binding list", token)

            if token.is_keyword("type"):
                nxt = self._peek(1)
                if nxt.is_keyword("as"):
                    # `type as x` aliases a binding named "type"
                    after = self._peek(2)
                    inline_type = after.is_punct(",", "}") or after.is_keyword("as")
                else:
                    inline_type = nxt.is_name or nxt.kind is TokenKind.STRING_LITERAL
                if inline_type:
                    self._advance()
                    token = nxt

            if token.kind is TokenKind.STRING_LITERAL and allow_string_names:
                name = _unquote(self._advance().text)
            else:
                name = self._expect_name()

            alias = None
            if self._peek().is_keyword("as"):
                self._advance()
                alias = self._expect_name()
            names.append(ImportedName(name, alias))

    # ── export ─────────────────────────────────────────────────

    def _export_statement(self) -> None:
        start = self._advance()
        token = self._peek()

        if token.is_punct("{", "*"):
            self._export_clause(start, type_only=False)
        elif token.is_keyword("type") and self._peek(1).is_punct("{", "*"):
            self._advance()
            self._export_clause(start, type_only=True)
        elif token.is_keyword("default"):
            self._default_export(start)
        elif token.is_keyword("import"):
            self._import_statement()  # `export import x = require("m")`
        elif token.is_keyword("const", "let", "var"):
            if self._peek(1).is_name and self._peek(1).text == "enum":
                self._advance()
                self._export_declaration(start)
            else:
                self._export_variable(start)
        elif token.is_name and (
            token.text in _DECLARATION_WORDS
            or token.text in _MODIFIERS
            or token.text in _TYPE_DECLARATION_WORDS
        ):
            self._export_declaration(start)
        else:
            raise _Abort(ErrorCode.DP200, f"unsupported export form at {token.text!r}", token)

    def _export_clause(self, start: Token, type_only: bool) -> None:
        token = self._peek()
        if token.is_punct("*"):
            self._advance()
            namespace = None
            if self._peek().is_keyword("as"):
                self._advance()
                namespace = self._expect_name()
            self._expect_keyword("from")
            specifier = self._expect_specifier()
            self._emit(
                self._statement(
                    StatementKind.RE_EXPORT_ALL,
                    start,
                    specifier,
                    is_type_only=type_only,
                    is_namespace=namespace is not None,
                    imported_names=(ImportedName("*", namespace),) if namespace else (),
                    re_export=True,
                )
            )
            if namespace:
                self._export_names([namespace])
            return

        names = tuple(self._binding_list(allow_string_names=False))
        if self._peek().is_keyword("from"):
            self._advance()
            specifier = self._expect_specifier()
            statement = self._statement(
                StatementKind.RE_EXPORT_NAMED,
                start,
                specifier,
                is_type_only=type_only,
                imported_names=names,
                re_export=True,
            )
        else:
            statement = self._statement(
                StatementKind.STATIC_EXPORT, start, is_type_only=type_only, imported_names=names
            )
        self._emit(statement)
        self._export_names(n.local for n in names)

    def _default_export(self, start: Token) -> None:
        self._advance()
        local = None
        token = self._peek()
        if token.is_keyword("async") and self._peek(1).is_keyword("function", "function*"):
            self._advance()
            token = self._peek()
        if token.is_keyword("function", "function*", "class", "interface") or (
            token.is_name and token.text == "abstract" and self._peek(1).is_keyword("class")
        ):
            if token.text == "abstract":
                self._advance()
            self._advance()
            if self._peek().is_punct("*"):
                self._advance()
            nxt = self._peek()
            if nxt.kind is TokenKind.IDENTIFIER and nxt.text not in ("extends", "implements"):
                local = self._advance().text
        self._emit(
            self._statement(
                StatementKind.DEFAULT_EXPORT_DECL,
                start,
                is_default=True,
                imported_names=(ImportedName("default", local),),
            )
        )
        self._export_names(["default"])

    def _export_declaration(self, start: Token) -> None:
        while self._peek().is_name and self._peek().text in _MODIFIERS:
            self._advance()
        token = self._peek()
        if token.is_keyword("const", "let", "var"):
            self._export_variable(start)  # `export declare const x: T`
            return
        if not (token.is_name and (token.text in _DECLARATION_WORDS or token.text in _TYPE_DECLARATION_WORDS)):
            raise _Abort(ErrorCode.DP201, f"expected a declaration, found {token.text!r}", token)

        word = self._advance().text
        if word == "function" and self._peek().is_punct("*"):
            self._advance()
        if self._peek().kind is TokenKind.STRING_LITERAL:
            raise _Abort(ErrorCode.DP200, "ambient module declarations export nothing", self._peek())
        name = self._expect_name()
        self._emit(
            self._statement(
                StatementKind.STATIC_EXPORT,
                start,
                is_type_only=word in _TYPE_DECLARATION_WORDS,
                imported_names=(ImportedName(name),),
            )
        )
        self._export_names([name])

    def _export_variable(self, start: Token) -> None:
        self._advance()  # const / let / var
        at = len(self.result.statements)
        names: list[str] = []
        self._binding_pattern(names)
        if self._peek().is_punct(":"):
            self._skip_type_annotation()
        if self._peek().is_punct("="):
            self._advance()
            self._scan_expression(stops=(";", ","))

        stop = self._peek()
        if stop.is_punct(","):
            raise _Abort(ErrorCode.DP200, "multiple declarators in one export are not supported", stop)
        if stop.is_punct(";"):
            self._advance()
        # One statement per bound name, ahead of any calls in the initializer
        for offset, name in enumerate(names):
            self._emit(
                self._statement(StatementKind.STATIC_EXPORT, start, imported_names=(ImportedName(name),)),
                at=at + offset,
            )
        self._export_names(names)

    # ── Destructuring ──────────────────────────────────────────

    def _binding_pattern(self, names: list[str]) -> None:
        """Collect bound names from an identifier, object or array pattern.

        Nested patterns are walked with an explicit stack of pending
        closers, capped at ``max_depth`` open patterns.
        """
        closers: list[str] = []
        self._pattern_target(names, closers)
        while closers:
            token = self._peek()
            if token.is_punct(closers[-1]):
                self._advance()
                closers.pop()
                if closers:
                    self._pattern_default()
                continue
            if token.is_punct(","):
                self._advance()
                continue
            if closers[-1] == "]":
                if token.is_punct("..."):
                    self._advance()
                if not self._pattern_target(names, closers):
                    self._pattern_default()
            elif not self._pattern_property(names, closers):
                self._pattern_default()

    def _pattern_target(self, names: list[str], closers: list[str]) -> bool:
        """Bind a name or open a nested pattern; return whether one was opened."""
        token = self._peek()
        if token.is_name:
            names.append(self._advance().text)
            return False
        if token.is_punct("{", "["):
            if len(closers) >= self.max_depth:
                raise _Abort(
                    ErrorCode.DP104, f"destructuring nested deeper than {self.max_depth} levels", token
                )
            self._advance()
            closers.append("}" if token.text == "{" else "]")
            return True
        raise _Abort(ErrorCode.DP201, f"unexpected token {token.text!r} in binding", token)

    def _pattern_property(self, names: list[str], closers: list[str]) -> bool:
        """One ``key``, ``key: target`` or ``...rest`` entry of an object pattern."""
        token = self._peek()
        if token.is_punct("..."):
            self._advance()
            return self._pattern_target(names, closers)
        if token.is_punct("["):
            self._skip_balanced()  # computed key
            key = None
        elif token.is_name or token.kind in (TokenKind.STRING_LITERAL, TokenKind.NUMBER):
            key = self._advance()
        else:
            raise _Abort(ErrorCode.DP201, f"unexpected token {token.text!r} in pattern", token)

        if self._peek().is_punct(":"):
            self._advance()
            return self._pattern_target(names, closers)
        if key is not None and key.is_name:
            names.append(key.text)
            return False
        raise _Abort(ErrorCode.DP201, "pattern property without a binding", self._peek())

    def _pattern_default(self) -> None:
        if self._peek().is_punct("="):
            self._advance()
            self._scan_expression(stops=(",",), asi=False)

    # ── Skipping ───────────────────────────────────────────────

    def _skip_balanced(self) -> None:
        """Skip a bracketed group starting at the cursor, calls included."""
        self._advance()
        self._scan_expression(stops=(), asi=False)
        if self._peek().kind is not TokenKind.EOF:
            self._advance()

    def _skip_type_annotation(self) -> None:
        """Skip ``: Type`` up to ``=``, ``;`` or ``,`` outside brackets and angles."""
        self._advance()
        depth = 0
        angles = 0
        while True:
            token = self._peek()
            if token.kind is TokenKind.EOF:
                return
            if token.kind is TokenKind.PUNCTUATOR:
                text = token.text
                if depth == 0 and angles == 0 and text in ("=", ";", ","):
                    return
                if text in _OPENERS:
                    depth += 1
                elif text in _CLOSERS:
                    if depth == 0:
                        return
                    depth -= 1
                elif text == "<":
                    angles += 1
                elif text in (">", ">>", ">>>") and angles:
                    angles = max(0, angles - len(text))
            elif self._at_statement_boundary(token, depth + angles):
                return
            self._advance()

    def _scan_expression(self, stops: tuple[str, ...], asi: bool = True) -> None:
        """Step over an expression, recording any require()/import() calls.

        Stops before a depth-zero punctuator in ``stops``, before a closer
        that does not belong to the expression, before a new import/export
        statement and, when ``asi`` is set, at an automatic-semicolon line
        break.
        """
        depth = 0
        while True:
            token = self._peek()
            if token.kind is TokenKind.EOF:
                return
            if token.kind is TokenKind.TEMPLATE_EXPR_START:
                depth += 1
            elif token.kind is TokenKind.TEMPLATE_EXPR_END:
                if depth == 0:
                    return
                depth -= 1
            elif token.kind is TokenKind.PUNCTUATOR:
                if depth == 0 and token.text in stops:
                    return
                if token.text in _OPENERS:
                    depth += 1
                elif token.text in _CLOSERS:
                    if depth == 0:
                        return
                    depth -= 1
            elif token.kind is TokenKind.KEYWORD and not self._after_member_access():
                if token.text in ("import", "export") and not self._peek(1).is_punct("(", ".", ":"):
                    return
                if token.text in ("import", "require") and self._peek(1).is_punct("("):
                    start = self._advance()
                    self._advance()
                    kind = StatementKind.DYNAMIC_IMPORT if start.text == "import" else StatementKind.REQUIRE_CALL
                    if self._call_arguments(start, kind):
                        depth += 1
                    continue
            if asi and self._at_statement_boundary(token, depth):
                return
            self._advance()

    def _at_statement_boundary(self, token: Token, depth: int) -> bool:
        prev = self._prev
        return (
            depth == 0
            and prev is not None
            and token.line > prev.line
            and token.is_name
            and token.text not in _CONTINUATION_WORDS
            and _ends_expression(prev)
        )

    # ── require() / import() ───────────────────────────────────

    def _require_call(self) -> None:
        start = self._advance()
        if not self._peek().is_punct("("):
            return  # `require.resolve`, `typeof require`, ...
        self._advance()
        self._call_arguments(start, StatementKind.REQUIRE_CALL)

    def _call_arguments(self, start: Token, kind: StatementKind) -> bool:
        """Record a call whose ``(`` was just consumed.

        A sole literal argument is consumed along with the closing paren and
        becomes the specifier. Anything else is recorded with no specifier
        and left in place so nested calls are still seen; the return value
        says whether the paren is still open.
        """
        arg = self._peek()
        if _is_literal_string(arg):
            closer = 1
            if self._peek(1).is_punct(",") and self._peek(2).is_punct(")"):
                closer = 2
            if self._peek(closer).is_punct(")"):
                self._advance()
                for _ in range(closer):
                    self._advance()
                self._emit(self._statement(kind, start, _unquote(arg.text)))
                return False
        self._emit(self._statement(kind, start))
        logger.debug(f"{self.path}:{start.line}: {start.text}() with a non-literal argument")
        return True


def extract_dependencies(
    text: str, path: str = "", jsx: bool = False, max_depth: int = 512
) -> FileDependencies:
    """Scan and extract one file.

    Args:
        text: Decoded source text
        path: Canonical path recorded on statements and diagnostics
        jsx: Whether the file may contain JSX
        max_depth: Scanner mode stack and destructuring nesting cap

    Returns:
        FileDependencies with statements, exported symbols and the combined
        scanner/extractor diagnostics ordered by position
    """
    scanner = Scanner(text, jsx=jsx, path=path, max_depth=max_depth)
    result = StatementExtractor(scanner, path=path, max_depth=max_depth).extract()
    result.jsx = jsx
    result.diagnostics = sorted(
        scanner.diagnostics + result.diagnostics, key=lambda d: (d.line, d.column)
    )
    return result
