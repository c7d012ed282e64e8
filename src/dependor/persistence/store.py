"""Graph persistence.

The graph file is a JSON object mapping each canonical path to the ordered
list of paths it imports. It is all the path query needs. Everything else
(exported symbols, external packages, dangling references, provenance,
diagnostics) goes to an optional metadata sidecar.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ErrorCode, FileAccessError, PersistenceError
from ..file_ops import safe_read_file, safe_write_file
from ..graph.models import DependencyGraph, GraphSnapshot
from ..logging_config import get_logger

logger = get_logger(__name__)


def save_graph(graph: DependencyGraph, path: Path) -> None:
    """Write the adjacency mapping as JSON.

    Raises:
        FileAccessError: If the file cannot be written
    """
    adjacency = graph.to_adjacency()
    safe_write_file(Path(path), json.dumps(adjacency, indent=2) + "\n")
    logger.info(f"Saved graph with {len(adjacency)} nodes to {path}")


def graph_metadata(graph: DependencyGraph) -> dict[str, Any]:
    return {
        "nodes": {
            path: {
                "exportedSymbols": sorted(node.exported_symbols),
                "scanned": node.scanned,
            }
            for path, node in graph.nodes.items()
        },
        "external": [
            {"source": ref.source, "specifier": ref.specifier, "package": ref.package}
            for ref in graph.external
        ],
        "dangling": [
            {"source": ref.source, "specifier": ref.specifier, "reason": ref.reason}
            for ref in graph.dangling
        ],
        "provenance": [p.to_json() for p in graph.provenance],
        "diagnostics": [d.to_json() for d in graph.diagnostics],
    }


def save_metadata(graph: DependencyGraph, path: Path) -> None:
    """Write the metadata sidecar.

    Raises:
        FileAccessError: If the file cannot be written
    """
    safe_write_file(Path(path), json.dumps(graph_metadata(graph), indent=2) + "\n")
    logger.info(f"Saved graph metadata to {path}")


def load_graph(path: Path, max_bytes: Optional[int] = None) -> GraphSnapshot:
    """Load a persisted graph as an immutable snapshot.

    Raises:
        PersistenceError: If the file is missing, unreadable or not a
            mapping of path -> list of paths
    """
    path = Path(path)
    if not path.exists():
        raise PersistenceError(path, f"[{ErrorCode.DP900.value}] file not found")
    try:
        raw = json.loads(safe_read_file(path, max_bytes=max_bytes, errors="strict"))
    except FileAccessError as e:
        raise PersistenceError(path, f"[{ErrorCode.DP900.value}] {e.reason}")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PersistenceError(path, f"[{ErrorCode.DP901.value}] invalid JSON: {e}")

    if not isinstance(raw, dict):
        raise PersistenceError(path, f"[{ErrorCode.DP901.value}] top-level value must be an object")
    for source, destinations in raw.items():
        if not isinstance(destinations, list) or not all(isinstance(d, str) for d in destinations):
            raise PersistenceError(
                path, f"[{ErrorCode.DP901.value}] edges of '{source}' must be a list of paths"
            )

    snapshot = GraphSnapshot(raw)
    logger.debug(f"Loaded {snapshot!r} from {path}")
    return snapshot
