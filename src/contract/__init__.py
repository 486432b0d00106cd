"""Stable collaborator contract surface for fxbuild-core.

Descriptor and usage documents, the collaborator protocols, artifact
coordinates and report file names. Treat these exports as the boundary
between the resolution core and the tools feeding or consuming it.
"""

from contract.coordinates import ArtifactCoordinates
from contract.descriptors import (
    DESCRIPTOR_SCHEMA_VERSION,
    AutoInjectionDecl,
    DependencyDecl,
    ExportSnapshot,
    LibraryDecl,
    ModuleDescriptor,
    ServiceProviderDecl,
    SnapshotModule,
)
from contract.ports import DescriptorSource, RepositoryClient, UsageAnalyzer
from contract.reports import (
    ARTIFACTS_JSONL,
    CYCLES_JSON,
    DEPENDENCIES_JSONL,
    MODULES_JSONL,
    REPORT_SCHEMA_VERSION,
    REPORT_SPECS,
    ReportSpec,
)
from contract.usage import EMPTY_USAGE, StaticUsage


def __getattr__(name: str) -> object:
    if name in {"ArtifactRecord", "CyclesSummary", "DependencyRecord", "ModuleRecord"}:
        from reports.models import (
            ArtifactRecord,
            CyclesSummary,
            DependencyRecord,
            ModuleRecord,
        )

        return {
            "ArtifactRecord": ArtifactRecord,
            "CyclesSummary": CyclesSummary,
            "DependencyRecord": DependencyRecord,
            "ModuleRecord": ModuleRecord,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACTS_JSONL",
    "CYCLES_JSON",
    "DEPENDENCIES_JSONL",
    "DESCRIPTOR_SCHEMA_VERSION",
    "EMPTY_USAGE",
    "MODULES_JSONL",
    "REPORT_SCHEMA_VERSION",
    "REPORT_SPECS",
    "ArtifactCoordinates",
    "ArtifactRecord",
    "AutoInjectionDecl",
    "CyclesSummary",
    "DependencyDecl",
    "DependencyRecord",
    "DescriptorSource",
    "ExportSnapshot",
    "LibraryDecl",
    "ModuleDescriptor",
    "ModuleRecord",
    "ReportSpec",
    "RepositoryClient",
    "ServiceProviderDecl",
    "SnapshotModule",
    "StaticUsage",
    "UsageAnalyzer",
]
