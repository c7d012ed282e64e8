"""Tokenizing and dependency-statement extraction for JS/TS sources."""

from .discovery import SourceFile, discover_sources, iter_project_paths
from .extractor import StatementExtractor, extract_dependencies
from .languages import LANGUAGES, LanguageConfig, detect_language, get_all_known_extensions, jsx_enabled
from .lexer import Scanner, significant_tokens, tokenize
from .statements import (
    DependencyStatement,
    FileDependencies,
    ImportedName,
    SourceRange,
    StatementKind,
)
from .syntax_extractor import DependencyExtractor
from .tokens import KEYWORDS, LexMode, Token, TokenKind

__all__ = [
    # Lexing
    "Scanner",
    "Token",
    "TokenKind",
    "LexMode",
    "KEYWORDS",
    "tokenize",
    "significant_tokens",
    # Extraction
    "StatementExtractor",
    "extract_dependencies",
    "DependencyExtractor",
    "DependencyStatement",
    "FileDependencies",
    "ImportedName",
    "SourceRange",
    "StatementKind",
    # Discovery
    "SourceFile",
    "discover_sources",
    "iter_project_paths",
    "LanguageConfig",
    "LANGUAGES",
    "detect_language",
    "get_all_known_extensions",
    "jsx_enabled",
]
