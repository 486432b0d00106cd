"""Module listing generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contract.reports import MODULES_JSONL
from reports.models import ModuleRecord
from reports.utils import _write_jsonl

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import ProjectModule


def _module_record(module: ProjectModule) -> ModuleRecord:
    return ModuleRecord(
        name=module.name,
        kind=module.kind.value,
        parent=module.parent_name,
        executable=module.is_executable(),
        interface=module.is_interface,
        aggregate=module.is_aggregate,
        automatic=module.is_automatic,
        platforms=[platform.value for platform in module.target.supported_platforms],
        group_id=module.group_id,
        artifact_id=module.artifact_id,
        version=module.version,
    )


class ModulesGenerator:
    """Generator for modules.jsonl."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "modules"

    def generate(
        self,
        root: ProjectModule,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Write one record per module of the tree, parents before children."""
        out_dir.mkdir(parents=True, exist_ok=True)

        records = [_module_record(module) for module in root.this_and_children_in_depth]
        _write_jsonl(out_dir / MODULES_JSONL, records)

        return [record.model_dump(mode="json") for record in records], {
            "module_count": len(records)
        }


__all__ = ["MODULES_JSONL", "ModulesGenerator"]
