"""Dependency graph model, construction and queries."""

from .algorithms import (
    PathResult,
    dependents,
    find_cycles,
    find_path,
    format_path,
    reverse_edges,
    tarjan_scc,
    traverse,
)
from .barrels import BarrelIndex, is_index_file
from .builder import GraphBuilder, build_dependency_graph
from .models import (
    DanglingReference,
    DependencyGraph,
    EdgeProvenance,
    ExternalPackage,
    ExternalReference,
    GraphSnapshot,
    ModuleNode,
    ProjectFile,
    Resolution,
    Unresolved,
)
from .resolver import PathSetResolver, package_name

__all__ = [
    "DependencyGraph",
    "GraphSnapshot",
    "ModuleNode",
    "EdgeProvenance",
    "ExternalReference",
    "DanglingReference",
    "ProjectFile",
    "ExternalPackage",
    "Unresolved",
    "Resolution",
    "PathSetResolver",
    "package_name",
    "BarrelIndex",
    "is_index_file",
    "GraphBuilder",
    "build_dependency_graph",
    "PathResult",
    "find_path",
    "format_path",
    "reverse_edges",
    "traverse",
    "dependents",
    "find_cycles",
    "tarjan_scc",
]
