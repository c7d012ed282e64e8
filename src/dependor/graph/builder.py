"""Dependency graph construction from extracted statements."""

from __future__ import annotations

from threading import Lock
from typing import Mapping, Optional

from ..exceptions.taxonomy import Diagnostic, ErrorCode
from ..logging_config import get_logger, log_diagnostic
from ..scanning.statements import DependencyStatement, FileDependencies, StatementKind
from .barrels import BarrelIndex, is_index_file
from .models import (
    DanglingReference,
    DependencyGraph,
    EdgeProvenance,
    ExternalPackage,
    ExternalReference,
    ProjectFile,
)
from .resolver import ResolveFn

logger = get_logger(__name__)


class GraphBuilder:
    """Single-writer graph assembly.

    ``add_file`` may be called from several threads; node creation and edge
    insertion are serialised by a lock.

    Args:
        resolve: Specifier resolver ``(from_path, specifier) -> Resolution``
        barrels: Optional barrel index used to redirect named imports
    """

    def __init__(self, resolve: ResolveFn, barrels: Optional[BarrelIndex] = None):
        self.graph = DependencyGraph()
        self._resolve = resolve
        self._barrels = barrels
        self._lock = Lock()

    def register(self, path: str, exported_symbols: Optional[set[str]] = None) -> None:
        """Create (or complete) the node for a scanned file."""
        with self._lock:
            self.graph.mark_scanned(path, exported_symbols)

    def add_file(self, deps: FileDependencies) -> None:
        """Insert a scanned file's node, edges and diagnostics."""
        with self._lock:
            self.graph.mark_scanned(deps.path, deps.exported_symbols)
            self.graph.diagnostics.extend(deps.diagnostics)
            for statement in deps.statements:
                if statement.creates_edge:
                    self._add_statement(deps.path, statement)

    def _add_statement(self, source: str, statement: DependencyStatement) -> None:
        specifier = statement.specifier
        outcome = self._resolve(source, specifier)

        if isinstance(outcome, ProjectFile):
            for destination in self._destinations(outcome.path, statement):
                self.graph.add_edge(
                    source,
                    destination,
                    EdgeProvenance(
                        source=source,
                        destination=destination,
                        specifier=specifier,
                        kind=statement.kind.value,
                        line=statement.range.line,
                    ),
                )
        elif isinstance(outcome, ExternalPackage):
            self.graph.external.append(ExternalReference(source, specifier, outcome.name))
            logger.debug(f"[{ErrorCode.DP301.value}] {source}: '{specifier}' is package {outcome.name}")
        else:
            self.graph.dangling.append(DanglingReference(source, specifier, outcome.reason))
            diagnostic = Diagnostic(
                ErrorCode.DP300,
                f"cannot resolve '{specifier}'",
                source,
                statement.range.line,
                statement.range.column,
            )
            self.graph.diagnostics.append(diagnostic)
            log_diagnostic(logger, diagnostic)

    def _destinations(self, resolved: str, statement: DependencyStatement) -> list[str]:
        """Edge targets for one statement, following barrels when enabled."""
        if (
            self._barrels is None
            or statement.kind is not StatementKind.STATIC_IMPORT
            or not statement.imported_names
            or not is_index_file(resolved)
        ):
            return [resolved]

        destinations: list[str] = []
        for binding in statement.imported_names:
            target = None
            if binding.name not in ("default", "*"):
                target = self._barrels.origin_of(resolved, binding.name)
            destination = target or resolved
            if destination not in destinations:
                destinations.append(destination)
        return destinations


def build_dependency_graph(
    files: Mapping[str, FileDependencies],
    resolve: ResolveFn,
    resolve_barrels: bool = False,
) -> DependencyGraph:
    """Build the dependency graph for a set of extracted files.

    Every scanned file becomes a node before any edge is added, so node
    order follows ``files`` and forward references never create stubs for
    project files.

    Args:
        files: Extraction results keyed by canonical path
        resolve: Specifier resolver
        resolve_barrels: Redirect named imports through index re-exports

    Returns:
        The assembled DependencyGraph
    """
    barrels = BarrelIndex(files, resolve) if resolve_barrels else None
    builder = GraphBuilder(resolve, barrels)
    for path, deps in files.items():
        builder.register(path, deps.exported_symbols)
    for deps in files.values():
        builder.add_file(deps)

    graph = builder.graph
    logger.info(
        f"Built graph: {len(graph)} nodes, {graph.edge_count} edges, "
        f"{len(graph.external)} external, {len(graph.dangling)} dangling"
    )
    return graph
