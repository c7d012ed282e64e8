"""Error taxonomy with error codes for recoverable conditions.

Error Code Convention:
    DP1xx - Lexing errors (scanner resynchronised)
    DP2xx - Extraction errors (statement skipped)
    DP3xx - Resolution outcomes (specifier not a project file)
    DP4xx - Query outcomes
    DP9xx - Persistence errors

Lexing, extraction and resolution problems never abort a run. They are
recorded as ``Diagnostic`` entries next to the partial results instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Lexing (DP1xx)
    DP100 = "DP100"  # Unterminated string literal
    DP101 = "DP101"  # Unterminated template literal
    DP102 = "DP102"  # Unterminated regex literal
    DP103 = "DP103"  # Unterminated block comment
    DP104 = "DP104"  # Mode stack nesting cap exceeded
    DP105 = "DP105"  # Unbalanced closing delimiter

    # Extraction (DP2xx)
    DP200 = "DP200"  # Unsupported statement shape
    DP201 = "DP201"  # Unexpected token inside a dependency statement
    DP202 = "DP202"  # Extraction of a whole file failed

    # Resolution (DP3xx)
    DP300 = "DP300"  # Specifier did not resolve (dangling reference)
    DP301 = "DP301"  # Specifier resolved to an external package

    # Query (DP4xx)
    DP400 = "DP400"  # No path between origin and destination
    DP401 = "DP401"  # Missing origin or destination

    # Persistence (DP9xx)
    DP900 = "DP900"  # Graph file unreadable
    DP901 = "DP901"  # Graph file malformed

    @property
    def category(self) -> str:
        return _CATEGORIES[self.value[2]]


_CATEGORIES = {
    "1": "lexing",
    "2": "extraction",
    "3": "resolution",
    "4": "query",
    "9": "persistence",
}


@dataclass(frozen=True)
class Diagnostic:
    """A recorded, recoverable problem.

    Attributes:
        code: Structured error code for categorization
        message: Human-readable description
        path: Source file the problem belongs to (empty when unknown)
        line: 1-based line, 0 when not tied to a position
        column: 1-based column, 0 when not tied to a position
    """

    code: ErrorCode
    message: str
    path: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        location = self.path
        if self.line:
            location = f"{location}:{self.line}:{self.column}"
        prefix = f"[{self.code.value}]"
        return f"{prefix} {location}: {self.message}" if location else f"{prefix} {self.message}"

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "category": self.code.category,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "column": self.column,
        }
