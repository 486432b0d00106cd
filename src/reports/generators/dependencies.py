"""Resolved dependency edge generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contract.reports import DEPENDENCIES_JSONL
from reports.models import DependencyRecord
from reports.utils import _write_jsonl
from resolve.dependencies import DependencyResolver, destinations

if TYPE_CHECKING:
    from pathlib import Path

    from modules.dependency import ModuleDependency
    from modules.models import ProjectModule


def _dependency_record(
    consumer: str, dependency: ModuleDependency, *, transitive_closure: bool
) -> DependencyRecord:
    target = dependency.executable_target
    return DependencyRecord(
        source=consumer,
        destination=dependency.destination,
        type=dependency.type.value,
        transitive_closure=transitive_closure,
        optional=dependency.optional,
        transitive=dependency.transitive,
        scope=dependency.scope,
        classifier=dependency.classifier,
        executable_target=str(target) if target is not None else None,
    )


def _module_dependency_records(
    resolver: DependencyResolver, module: ProjectModule
) -> list[DependencyRecord]:
    direct = resolver.direct_dependencies(module).to_list()
    records = [
        _dependency_record(module.name, dependency, transitive_closure=False)
        for dependency in direct
    ]
    direct_destinations = set(destinations(direct))
    records.extend(
        _dependency_record(module.name, dependency, transitive_closure=True)
        for dependency in resolver.transitive_dependencies(module)
        if dependency.destination not in direct_destinations
    )
    return records


class DependenciesGenerator:
    """Generator for dependencies.jsonl."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "dependencies"

    def generate(
        self,
        root: ProjectModule,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Write the direct edges of every module, then its remaining closure.

        Edges reached only through the closure are attributed to the
        consuming module and flagged ``transitive_closure``.
        """
        resolver: DependencyResolver = kwargs.get("resolver") or DependencyResolver(
            root.registry
        )

        out_dir.mkdir(parents=True, exist_ok=True)

        records: list[DependencyRecord] = []
        for module in root.this_and_children_in_depth:
            records.extend(_module_dependency_records(resolver, module))
        _write_jsonl(out_dir / DEPENDENCIES_JSONL, records)

        direct_count = sum(1 for record in records if not record.transitive_closure)
        return [record.model_dump(mode="json") for record in records], {
            "direct_edge_count": direct_count,
            "transitive_edge_count": len(records) - direct_count,
        }


__all__ = ["DEPENDENCIES_JSONL", "DependenciesGenerator"]
