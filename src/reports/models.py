"""Record models of the generated reports."""

from __future__ import annotations

from pydantic import BaseModel, Field


def _report_schema_version() -> int:
    from contract.reports import REPORT_SCHEMA_VERSION

    return REPORT_SCHEMA_VERSION


class ModuleRecord(BaseModel):
    """One project module of the resolved tree."""

    schema_version: int = Field(default_factory=_report_schema_version)
    name: str
    kind: str
    parent: str | None = None
    executable: bool = False
    interface: bool = False
    aggregate: bool = False
    automatic: bool = False
    platforms: list[str] = Field(default_factory=list)
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None


class DependencyRecord(BaseModel):
    """One resolved dependency edge.

    ``transitive_closure`` is False for the direct edges of ``source`` and
    True for edges only reached through its transitive closure.
    """

    schema_version: int = Field(default_factory=_report_schema_version)
    source: str
    destination: str
    type: str
    transitive_closure: bool = False
    optional: bool = False
    transitive: bool = False
    scope: str | None = None
    classifier: str | None = None
    executable_target: str | None = None


class ArtifactRecord(BaseModel):
    """An artifact declared by a module in its own build context."""

    schema_version: int = Field(default_factory=_report_schema_version)
    module: str
    group_id: str | None = None
    artifact_id: str
    version: str | None = None
    scope: str | None = None
    classifier: str | None = None
    type: str | None = None


class CyclesSummary(BaseModel):
    """Direct dependency graph metrics and the loops found in it."""

    schema_version: int = Field(default_factory=_report_schema_version)
    root: str
    node_count: int
    edge_count: int
    loops: list[list[str]] = Field(default_factory=list)
    fan_in: dict[str, int] = Field(default_factory=dict)
    fan_out: dict[str, int] = Field(default_factory=dict)
    build_order: list[str] = Field(default_factory=list)


__all__ = ["ArtifactRecord", "CyclesSummary", "DependencyRecord", "ModuleRecord"]
