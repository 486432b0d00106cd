"""Dependency loop summary generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contract.reports import CYCLES_JSON
from graph.algos import compute_fan_stats, topological_order
from graph.cycles import CycleAnalyzer
from reports.models import CyclesSummary
from reports.utils import _write_json
from resolve.dependencies import DependencyResolver

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import ProjectModule


class CyclesGenerator:
    """Generator for cycles.json."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "cycles"

    def generate(
        self,
        root: ProjectModule,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Write graph metrics and the loops of the tree's direct dependencies."""
        resolver: DependencyResolver = kwargs.get("resolver") or DependencyResolver(
            root.registry
        )
        analyzer = CycleAnalyzer(resolver)

        out_dir.mkdir(parents=True, exist_ok=True)

        graph = analyzer.dependency_graph(root)
        edges = sorted(
            (source, destination)
            for source, targets in graph.items()
            for destination in targets
        )
        fan_in, fan_out = compute_fan_stats(edges)

        summary = CyclesSummary(
            root=root.name,
            node_count=len(graph),
            edge_count=len(edges),
            loops=[list(loop.modules) for loop in analyzer.loops(root)],
            fan_in=dict(sorted(fan_in.items())),
            fan_out=dict(sorted(fan_out.items())),
            build_order=topological_order(graph),
        )
        _write_json(out_dir / CYCLES_JSON, summary)

        return [], summary.model_dump(mode="json")


__all__ = ["CYCLES_JSON", "CyclesGenerator"]
