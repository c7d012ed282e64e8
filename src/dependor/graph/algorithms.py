"""Graph queries: shortest dependency path, traversal, dependents, cycles.

All functions are read-only and accept either a DependencyGraph or an
immutable GraphSnapshot.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Optional

from ..exceptions import ErrorCode, QueryInputError
from .models import GraphLike, GraphSnapshot

PATH_SEPARATOR = " --> "


@dataclass(frozen=True)
class PathResult:
    """Outcome of a path query.

    Attributes:
        origin: Requested origin
        destination: Requested destination
        nodes: The path ``[origin, ..., destination]``, or None if not found
        expanded: Nodes whose edges were expanded during the search
    """

    origin: str
    destination: str
    nodes: Optional[tuple[str, ...]]
    expanded: int = 0

    @property
    def found(self) -> bool:
        return self.nodes is not None

    @property
    def code(self) -> Optional[ErrorCode]:
        """DP400 when no path exists, else None."""
        return None if self.found else ErrorCode.DP400

    def render(self) -> str:
        if self.nodes is None:
            return (
                f"no path from {self.origin} to {self.destination} found in dependency graph"
            )
        return format_path(self.nodes)

    def to_json(self) -> dict:
        return {
            "origin": self.origin,
            "destination": self.destination,
            "found": self.found,
            "path": list(self.nodes) if self.nodes is not None else None,
            "error_code": self.code.value if self.code else None,
        }


def format_path(nodes) -> str:
    return PATH_SEPARATOR.join(nodes)


def find_path(graph: GraphLike, origin: str, destination: str) -> PathResult:
    """Shortest edge path from ``origin`` to ``destination`` (BFS).

    Each dequeued node's edges are expanded in insertion order, so among
    equal-length paths the first discovered wins. A node is marked visited
    when it is dequeued; later queue entries for it are dropped.

    If ``origin`` equals ``destination`` or is not in the graph, the
    single-node path ``[origin]`` is returned without expansion.

    Raises:
        QueryInputError: If origin or destination is empty
    """
    if not origin or not destination:
        raise QueryInputError(origin, destination)

    if origin == destination or origin not in graph:
        return PathResult(origin, destination, (origin,))

    visited: set[str] = set()
    queue: deque[tuple[str, ...]] = deque([(origin,)])
    expanded = 0

    while queue:
        path = queue.popleft()
        node = path[-1]
        if node in visited:
            continue
        if node == destination:
            return PathResult(origin, destination, path, expanded)
        visited.add(node)
        expanded += 1
        for neighbor in graph.successors(node):
            if neighbor not in visited:
                queue.append(path + (neighbor,))

    return PathResult(origin, destination, None, expanded)


def reverse_edges(graph: GraphLike) -> GraphSnapshot:
    """Graph with every edge flipped: B -> A for each A -> B.

    Every node of ``graph`` is present, including those with no importers.
    """
    reverse: dict[str, list[str]] = {path: [] for path in graph}
    for source in graph:
        for destination in graph.successors(source):
            reverse.setdefault(destination, []).append(source)
    return GraphSnapshot(reverse)


def traverse(graph: GraphLike, start: str) -> list[str]:
    """Nodes reachable from ``start`` in BFS order, ``start`` first, each once.

    Returns an empty list if ``start`` is not in the graph.
    """
    if start not in graph:
        return []
    order: list[str] = []
    seen = {start}
    queue: deque[str] = deque([start])
    while queue:
        node = queue.popleft()
        order.append(node)
        for neighbor in graph.successors(node):
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return order


def dependents(graph: GraphLike, node: str) -> list[str]:
    """Files that transitively import ``node``, nearest first."""
    return [path for path in traverse(reverse_edges(graph), node) if path != node]


def find_cycles(graph: GraphLike) -> list[list[str]]:
    """Import cycles: strongly connected components with more than one node.

    Each component is sorted; components are ordered by their first path.
    """
    components = tarjan_scc(graph)
    cycles = [sorted(c) for c in components if len(c) > 1]
    return sorted(cycles, key=lambda c: c[0])


def tarjan_scc(graph: GraphLike) -> list[set[str]]:
    """Tarjan's algorithm for strongly connected components (iterative).

    Uses an explicit call stack to avoid Python recursion limits on deep
    dependency chains.
    """
    counter = 0
    scc_stack: list[str] = []
    on_stack: set[str] = set()
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    result: list[set[str]] = []

    for root in graph:
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        scc_stack.append(root)
        on_stack.add(root)
        call_stack = [(root, iter(graph.successors(root)))]

        while call_stack:
            v, it = call_stack[-1]
            pushed = False
            for w in it:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    scc_stack.append(w)
                    on_stack.add(w)
                    call_stack.append((w, iter(graph.successors(w))))
                    pushed = True
                    break
                elif w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])

            if not pushed:
                call_stack.pop()
                if call_stack:
                    caller = call_stack[-1][0]
                    lowlink[caller] = min(lowlink[caller], lowlink[v])

                if lowlink[v] == index[v]:
                    component: set[str] = set()
                    while True:
                        w = scc_stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    result.append(component)

    return result
