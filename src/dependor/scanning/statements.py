"""Dependency statement records produced by the extractor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..exceptions.taxonomy import Diagnostic


class StatementKind(Enum):
    STATIC_IMPORT = "StaticImport"
    STATIC_EXPORT = "StaticExport"
    RE_EXPORT_ALL = "ReExportAll"
    RE_EXPORT_NAMED = "ReExportNamed"
    DEFAULT_EXPORT_DECL = "DefaultExportDecl"
    REQUIRE_CALL = "RequireCall"
    DYNAMIC_IMPORT = "DynamicImport"


# Kinds that create an edge when their specifier resolves.
EDGE_KINDS = frozenset(
    {
        StatementKind.STATIC_IMPORT,
        StatementKind.RE_EXPORT_ALL,
        StatementKind.RE_EXPORT_NAMED,
        StatementKind.REQUIRE_CALL,
        StatementKind.DYNAMIC_IMPORT,
    }
)


@dataclass(frozen=True)
class ImportedName:
    """One binding in an import/export clause.

    ``name`` is the exported name on the source side ("default" for default
    imports, "*" for namespaces); ``alias`` is the local (or re-exported)
    name when it differs.
    """

    name: str
    alias: Optional[str] = None

    @property
    def local(self) -> str:
        return self.alias or self.name

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "alias": self.alias}


@dataclass(frozen=True)
class SourceRange:
    start: int
    end: int
    line: int
    column: int


@dataclass(frozen=True)
class DependencyStatement:
    """A module-system statement recognized in one file.

    ``specifier`` is None for require()/import() whose argument is not a
    single literal string.
    """

    kind: StatementKind
    specifier: Optional[str]
    source_file: str
    range: SourceRange
    is_type_only: bool = False
    is_default: bool = False
    is_namespace: bool = False
    imported_names: tuple[ImportedName, ...] = ()
    re_export: bool = False

    @property
    def creates_edge(self) -> bool:
        return self.kind in EDGE_KINDS and self.specifier is not None

    def to_json(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "specifier": self.specifier,
            "isTypeOnly": self.is_type_only,
            "isDefault": self.is_default,
            "isNamespace": self.is_namespace,
            "importedNames": [n.to_json() for n in self.imported_names],
            "reExport": self.re_export,
            "line": self.range.line,
            "column": self.range.column,
        }


@dataclass
class FileDependencies:
    """Everything extracted from one source file."""

    path: str
    statements: list[DependencyStatement] = field(default_factory=list)
    exported_symbols: set[str] = field(default_factory=set)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    jsx: bool = False

    @property
    def specifiers(self) -> list[str]:
        """Literal specifiers of edge-creating statements, in source order."""
        return [s.specifier for s in self.statements if s.creates_edge]
