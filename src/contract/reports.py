"""Report contract definitions.

File names and the schema version of the reports written by
``reports.generate_all_reports``. Consumers of the output directory rely on
these names staying stable.
"""

from __future__ import annotations

from dataclasses import dataclass

# Schema version stamped on every report record.
REPORT_SCHEMA_VERSION = 1

MODULES_JSONL = "modules.jsonl"
DEPENDENCIES_JSONL = "dependencies.jsonl"
ARTIFACTS_JSONL = "artifacts.jsonl"
CYCLES_JSON = "cycles.json"


@dataclass(frozen=True)
class ReportSpec:
    """Filename and format of one report."""

    filename: str
    format: str
    required_fields_note: str


REPORT_SPECS: tuple[ReportSpec, ...] = (
    ReportSpec(
        filename=MODULES_JSONL,
        format="jsonl",
        required_fields_note="schema_version, name, kind, parent, executable, "
        "interface, group_id, artifact_id, version",
    ),
    ReportSpec(
        filename=DEPENDENCIES_JSONL,
        format="jsonl",
        required_fields_note="schema_version, source, destination, type, "
        "transitive_closure",
    ),
    ReportSpec(
        filename=ARTIFACTS_JSONL,
        format="jsonl",
        required_fields_note="schema_version, module, group_id, artifact_id",
    ),
    ReportSpec(
        filename=CYCLES_JSON,
        format="json",
        required_fields_note="schema_version, node_count, edge_count, loops",
    ),
)


__all__ = [
    "ARTIFACTS_JSONL",
    "CYCLES_JSON",
    "DEPENDENCIES_JSONL",
    "MODULES_JSONL",
    "REPORT_SCHEMA_VERSION",
    "REPORT_SPECS",
    "ReportSpec",
]
