"""Analysis-related exceptions: file access, persistence, queries."""

from pathlib import Path
from typing import Optional

from .base import DependorError
from .taxonomy import ErrorCode


class AnalysisError(DependorError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed, read or written."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class PersistenceError(AnalysisError):
    """Raised when a persisted dependency graph cannot be loaded or saved."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot load dependency graph: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class QueryInputError(AnalysisError):
    """Raised when a path query is missing its origin or destination."""

    def __init__(self, origin: Optional[str], destination: Optional[str]):
        missing = [
            name
            for name, value in (("origin", origin), ("destination", destination))
            if not value
        ]
        super().__init__(
            f"[{ErrorCode.DP401.value}] Path query needs both an origin and a destination",
            details={"missing": ", ".join(missing)},
        )
        self.origin = origin
        self.destination = destination
        self.code = ErrorCode.DP401
