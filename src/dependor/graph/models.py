"""Data models for the module dependency graph.

The graph owns every ModuleNode; edges are stored as canonical paths and
looked up by key, so import cycles need no special ownership handling.

Edges are directed: A's outgoing_edges contains B means A imports B.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Sequence, Union

from ..exceptions.taxonomy import Diagnostic

# ── Resolution outcomes ────────────────────────────────────────────


@dataclass(frozen=True)
class ProjectFile:
    """Specifier resolved to a file inside the project."""

    path: str


@dataclass(frozen=True)
class ExternalPackage:
    """Specifier names a package or builtin outside the project."""

    name: str


@dataclass(frozen=True)
class Unresolved:
    """Specifier maps to nothing known (a dangling reference)."""

    reason: str = ""


Resolution = Union[ProjectFile, ExternalPackage, Unresolved]


# ── Provenance and non-graph references ────────────────────────────


@dataclass(frozen=True)
class EdgeProvenance:
    """One statement that contributed an edge."""

    source: str
    destination: str
    specifier: str
    kind: str
    line: int

    def to_json(self) -> dict:
        return {
            "source": self.source,
            "destination": self.destination,
            "specifier": self.specifier,
            "kind": self.kind,
            "line": self.line,
        }


@dataclass(frozen=True)
class ExternalReference:
    source: str
    specifier: str
    package: str


@dataclass(frozen=True)
class DanglingReference:
    source: str
    specifier: str
    reason: str = ""


# ── Nodes and the graph ────────────────────────────────────────────


@dataclass
class ModuleNode:
    """A project file in the graph.

    ``scanned`` is False for stubs created by a forward reference.
    """

    canonical_path: str
    exported_symbols: set[str] = field(default_factory=set)
    outgoing_edges: list[str] = field(default_factory=list)
    scanned: bool = False


@dataclass
class DependencyGraph:
    """Mutable graph assembled during one analysis run.

    Invariants:
        - every edge endpoint is a key in ``nodes``
        - each (source, destination) edge is stored once; repeated
          insertions only extend ``provenance``
        - per-node edge order is insertion order
    """

    nodes: dict[str, ModuleNode] = field(default_factory=dict)
    provenance: list[EdgeProvenance] = field(default_factory=list)
    external: list[ExternalReference] = field(default_factory=list)
    dangling: list[DanglingReference] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add_node(self, path: str) -> ModuleNode:
        """Return the node for ``path``, creating a stub on first reference."""
        node = self.nodes.get(path)
        if node is None:
            node = ModuleNode(canonical_path=path)
            self.nodes[path] = node
        return node

    def mark_scanned(self, path: str, exported_symbols: Optional[set[str]] = None) -> ModuleNode:
        node = self.add_node(path)
        node.scanned = True
        if exported_symbols:
            node.exported_symbols.update(exported_symbols)
        return node

    def add_edge(
        self, source: str, destination: str, provenance: Optional[EdgeProvenance] = None
    ) -> bool:
        """Insert source -> destination. Returns False if the edge already existed."""
        src = self.add_node(source)
        self.add_node(destination)
        if provenance is not None:
            self.provenance.append(provenance)
        if destination in src.outgoing_edges:
            return False
        src.outgoing_edges.append(destination)
        return True

    def has_edge(self, source: str, destination: str) -> bool:
        node = self.nodes.get(source)
        return node is not None and destination in node.outgoing_edges

    def successors(self, path: str) -> Sequence[str]:
        node = self.nodes.get(path)
        return node.outgoing_edges if node is not None else ()

    @property
    def edge_count(self) -> int:
        return sum(len(n.outgoing_edges) for n in self.nodes.values())

    def to_adjacency(self) -> dict[str, list[str]]:
        """Persistence form: path -> ordered destination paths."""
        return {path: list(node.outgoing_edges) for path, node in self.nodes.items()}

    def snapshot(self) -> "GraphSnapshot":
        return GraphSnapshot(self.to_adjacency())

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


class GraphSnapshot:
    """Read-only graph used by queries; safe to share between threads.

    Destinations that are not themselves keys of the mapping become nodes
    with no outgoing edges.
    """

    def __init__(self, adjacency: Mapping[str, Sequence[str]]):
        edges: dict[str, tuple[str, ...]] = {}
        for source, destinations in adjacency.items():
            edges[source] = tuple(dict.fromkeys(destinations))
        for destinations in list(edges.values()):
            for destination in destinations:
                edges.setdefault(destination, ())
        self._edges = MappingProxyType(edges)

    def successors(self, path: str) -> Sequence[str]:
        return self._edges.get(path, ())

    @property
    def edge_count(self) -> int:
        return sum(len(d) for d in self._edges.values())

    def to_adjacency(self) -> dict[str, list[str]]:
        return {path: list(destinations) for path, destinations in self._edges.items()}

    def __contains__(self, path: object) -> bool:
        return path in self._edges

    def __iter__(self) -> Iterator[str]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"GraphSnapshot(nodes={len(self)}, edges={self.edge_count})"


GraphLike = Union[DependencyGraph, GraphSnapshot]
