"""
dependor - static module-dependency analysis for JavaScript/TypeScript

Tokenizes each source file just well enough to find its import, export and
require constructs, resolves them into a dependency graph over project
files, and answers "why does A depend on B" with the shortest import path.
"""

__version__ = "0.1.0"

from .api import AnalysisResult, analyze
from .graph import (
    DependencyGraph,
    GraphSnapshot,
    ModuleNode,
    PathResult,
    build_dependency_graph,
    find_cycles,
    find_path,
    reverse_edges,
    traverse,
)
from .persistence import load_graph, save_graph
from .scanning import DependencyStatement, Scanner, StatementKind, extract_dependencies, tokenize

__all__ = [
    "analyze",  # Main entry point
    "AnalysisResult",
    # Core
    "Scanner",
    "tokenize",
    "extract_dependencies",
    "DependencyStatement",
    "StatementKind",
    "DependencyGraph",
    "GraphSnapshot",
    "ModuleNode",
    "build_dependency_graph",
    # Queries
    "PathResult",
    "find_path",
    "find_cycles",
    "reverse_edges",
    "traverse",
    # Persistence
    "save_graph",
    "load_graph",
]
