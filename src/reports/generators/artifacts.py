"""Resolved artifact coordinates generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contract.reports import ARTIFACTS_JSONL
from reports.models import ArtifactRecord
from reports.utils import _write_jsonl
from resolve.artifacts import ArtifactResolver
from resolve.dependencies import DependencyResolver

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import ProjectModule


class ArtifactsGenerator:
    """Generator for artifacts.jsonl."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "artifacts"

    def generate(
        self,
        root: ProjectModule,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Write the artifacts each module declares in its own build context."""
        resolver: DependencyResolver = kwargs.get("resolver") or DependencyResolver(
            root.registry
        )
        artifact_resolver = ArtifactResolver(resolver)

        out_dir.mkdir(parents=True, exist_ok=True)

        records: list[ArtifactRecord] = []
        for module in root.this_and_children_in_depth:
            records.extend(
                ArtifactRecord(
                    module=module.name,
                    group_id=coordinates.group_id,
                    artifact_id=coordinates.artifact_id,
                    version=coordinates.version,
                    scope=coordinates.scope,
                    classifier=coordinates.classifier,
                    type=coordinates.type,
                )
                for coordinates in artifact_resolver.module_artifacts(module)
            )
        _write_jsonl(out_dir / ARTIFACTS_JSONL, records)

        return [record.model_dump(mode="json") for record in records], {
            "artifact_count": len(records)
        }


__all__ = ["ARTIFACTS_JSONL", "ArtifactsGenerator"]
