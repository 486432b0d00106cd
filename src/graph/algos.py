"""Graph algorithms over module dependency graphs.

Graphs are plain adjacency dicts keyed by module name. Neighbors are always
visited in sorted order so every result is deterministic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def build_dependency_graph(edges: Iterable[tuple[str, str]]) -> dict[str, set[str]]:
    """Build a dependency graph from (source, destination) edges.

    Destinations without outgoing edges are present with an empty set.
    """
    graph: dict[str, set[str]] = {}
    for source, destination in edges:
        graph.setdefault(source, set()).add(destination)
        graph.setdefault(destination, set())
    return graph


def _canonical_loop(loop: list[str]) -> tuple[str, ...]:
    """The rotation of a loop starting at its smallest name."""
    start = loop.index(min(loop))
    return tuple(loop[start:] + loop[:start])


class _LoopSearch:
    """Mutable state of the loop-finding depth-first walk."""

    def __init__(self, graph: dict[str, set[str]]) -> None:
        self.graph = graph
        self.path: list[str] = []
        self.on_path: dict[str, int] = {}
        self.acyclic: set[str] = set()
        self.loops: dict[tuple[str, ...], None] = {}

    def visit(self, node: str) -> bool:
        """Walk every path from ``node``; True when one of them closes a loop."""
        self.on_path[node] = len(self.path)
        self.path.append(node)
        looped = False
        for neighbor in sorted(self.graph.get(node, ())):
            start = self.on_path.get(neighbor)
            if start is not None:
                self.loops.setdefault(_canonical_loop(self.path[start:]), None)
                looped = True
            elif neighbor not in self.acyclic and self.visit(neighbor):
                looped = True
        self.path.pop()
        del self.on_path[node]
        if not looped:
            # Nothing reachable from here leads back to any path node.
            self.acyclic.add(node)
        return looped


def find_loops(graph: dict[str, set[str]], starts: Iterable[str] | None = None) -> list[list[str]]:
    """Find dependency loops with a depth-first walk carrying the current path.

    Revisiting a node of the current path records the sub-path from its first
    occurrence as one loop. Loops are reported once whatever node they were
    entered from, each rotated to start at its smallest name.

    Args:
        graph: Adjacency dict
        starts: Nodes to walk from (default: every node)

    Returns:
        Loops sorted for deterministic output
    """
    search = _LoopSearch(graph)
    for node in sorted(starts if starts is not None else graph):
        if node not in search.acyclic:
            search.visit(node)
    return [list(loop) for loop in sorted(search.loops)]


def paths_between(
    graph: dict[str, set[str]],
    source: str,
    destination: str,
) -> list[list[str]]:
    """Every acyclic path from ``source`` to ``destination``."""
    paths: list[list[str]] = []
    path = [source]

    def extend(node: str) -> None:
        if node == destination and len(path) > 1:
            paths.append(list(path))
            return
        for neighbor in sorted(graph.get(node, ())):
            if neighbor in path and neighbor != destination:
                continue
            path.append(neighbor)
            extend(neighbor)
            path.pop()

    extend(source)
    return paths


def topological_order(graph: dict[str, set[str]]) -> list[str]:
    """Order nodes so that every module comes after its dependencies.

    Nodes on a loop are ordered by name among themselves.
    """
    order: list[str] = []
    visited: set[str] = set()

    def visit(node: str, active: set[str]) -> None:
        if node in visited or node in active:
            return
        active.add(node)
        for neighbor in sorted(graph.get(node, ())):
            visit(neighbor, active)
        active.discard(node)
        visited.add(node)
        order.append(node)

    for node in sorted(graph):
        visit(node, set())
    return order


def compute_fan_stats(
    edges: list[tuple[str, str]],
) -> tuple[dict[str, int], dict[str, int]]:
    """Compute fan-in and fan-out statistics from edges."""
    fan_in: dict[str, int] = {}
    fan_out: dict[str, int] = {}

    for source, target in edges:
        fan_out[source] = fan_out.get(source, 0) + 1
        fan_in[target] = fan_in.get(target, 0) + 1

    return fan_in, fan_out


__all__ = [
    "build_dependency_graph",
    "compute_fan_stats",
    "find_loops",
    "paths_between",
    "topological_order",
]
