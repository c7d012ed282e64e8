"""Exception hierarchy for dependor."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    PersistenceError,
    QueryInputError,
)
from .base import DependorError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .taxonomy import Diagnostic, ErrorCode

__all__ = [
    "DependorError",
    "AnalysisError",
    "FileAccessError",
    "PersistenceError",
    "QueryInputError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "Diagnostic",
    "ErrorCode",
]
