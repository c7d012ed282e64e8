"""Graph persistence (JSON adjacency file plus metadata sidecar)."""

from .store import graph_metadata, load_graph, save_graph, save_metadata

__all__ = ["save_graph", "save_metadata", "load_graph", "graph_metadata"]
