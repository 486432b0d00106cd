"""Cyclic dependency detection over the resolved direct dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from graph.algos import build_dependency_graph, find_loops, paths_between
from modules.models import RootModule
from resolve.dependencies import destinations

if TYPE_CHECKING:
    from modules.models import ProjectModule
    from resolve.dependencies import DependencyResolver

logger = logging.getLogger(__name__)

LOOPS_CACHE_KEY = "dependency_loops"
GRAPH_CACHE_KEY = "dependency_graph"


@dataclass(frozen=True)
class DependencyLoop:
    """Modules depending on each other in a circle, smallest name first."""

    modules: tuple[str, ...]

    def contains(self, *names: str) -> bool:
        return all(name in self.modules for name in names)

    @property
    def edges(self) -> list[tuple[str, str]]:
        following = self.modules[1:] + self.modules[:1]
        return list(zip(self.modules, following, strict=True))

    def __len__(self) -> int:
        return len(self.modules)

    def __str__(self) -> str:
        return " -> ".join((*self.modules, self.modules[0]))


class CycleAnalyzer:
    """Reports dependency loops of a module tree.

    Loops are data: nothing here fails because a loop exists. Results are
    cached on the root module of the tree.
    """

    def __init__(self, resolver: DependencyResolver) -> None:
        self.resolver = resolver
        self._caches: dict[str, dict[str, object]] = {}

    def _cache_of(self, root: ProjectModule) -> dict[str, object]:
        if isinstance(root, RootModule):
            return root.analysis_cache
        return self._caches.setdefault(root.name, {})

    def dependency_graph(self, root: ProjectModule) -> dict[str, set[str]]:
        """Direct dependency graph restricted to the modules of ``root``'s tree."""
        cache = self._cache_of(root)
        if GRAPH_CACHE_KEY not in cache:
            modules = root.this_and_children_in_depth.to_list()
            names = {module.name for module in modules}
            edges = [
                (module.name, destination)
                for module in modules
                for destination in destinations(self.resolver.direct_dependencies(module))
                if destination in names
            ]
            graph = build_dependency_graph(edges)
            for name in names:
                graph.setdefault(name, set())
            cache[GRAPH_CACHE_KEY] = graph
        return cast("dict[str, set[str]]", cache[GRAPH_CACHE_KEY])

    def loops(self, root: ProjectModule) -> list[DependencyLoop]:
        cache = self._cache_of(root)
        if LOOPS_CACHE_KEY not in cache:
            found = [
                DependencyLoop(tuple(loop))
                for loop in find_loops(self.dependency_graph(root))
            ]
            for loop in found:
                logger.debug("Dependency loop in %s: %s", root.name, loop)
            cache[LOOPS_CACHE_KEY] = found
        return list(cast("list[DependencyLoop]", cache[LOOPS_CACHE_KEY]))

    def loop_containing(self, root: ProjectModule, *names: str) -> DependencyLoop | None:
        """The first loop containing every module of ``names``, if any."""
        for loop in self.loops(root):
            if loop.contains(*names):
                return loop
        return None

    def has_loops(self, root: ProjectModule) -> bool:
        return bool(self.loops(root))

    def dependency_paths(
        self, root: ProjectModule, source: str, destination: str
    ) -> list[list[str]]:
        """Every acyclic path of direct dependencies from one module to another."""
        return paths_between(self.dependency_graph(root), source, destination)


__all__ = ["CycleAnalyzer", "DependencyLoop"]
