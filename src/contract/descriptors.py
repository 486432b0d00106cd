"""Module descriptor documents.

A descriptor declares everything the resolution core needs to know about one
module: its children, its dependency edges, the services it provides, the
auto-injection conditions it carries and its published coordinates. Fields
are optional at load time; a missing field the resolver needs later raises
``MalformedDescriptorError`` at that point.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DESCRIPTOR_SCHEMA_VERSION = 1

DeclaredDependencyType = Literal["source", "plugin", "resource"]


class _Document(BaseModel):
    model_config = ConfigDict(extra="ignore")


class DependencyDecl(_Document):
    """One declared dependency edge."""

    name: str
    type: DeclaredDependencyType = "source"
    optional: bool = False
    transitive: bool = Field(
        default=False,
        description="Propagate visibility to consumers of the declaring module",
    )
    scope: str | None = None
    classifier: str | None = None
    executable_target: str | None = Field(
        default=None,
        description="Dash-separated target tags; the edge only applies to "
        "executables built for a matching target",
    )


class ServiceProviderDecl(_Document):
    """An implementation this module registers for a service interface."""

    spi: str | None = None
    implementation: str


class AutoInjectionDecl(_Document):
    """Inject the declaring module into any consumer using all of these."""

    packages: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.packages or self.classes or self.services)


class LibraryDecl(_Document):
    """A third-party library referenced by coordinates."""

    name: str
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    type: str | None = None
    exported_packages: list[str] = Field(default_factory=list)
    published: bool | None = Field(
        default=None,
        description="True when the library is itself a published module tree "
        "(defaults to: has coordinates and exports no packages)",
    )


class SnapshotModule(_Document):
    """One module of an exported tree, embedded in its root's descriptor."""

    name: str
    parent: str | None = None
    descriptor: ModuleDescriptor = Field(default_factory=lambda: ModuleDescriptor())


class ExportSnapshot(_Document):
    """A serialized copy of a published tree's resolved metadata."""

    modules: list[SnapshotModule] = Field(default_factory=list)
    usages: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Package or class name -> modules of the tree using it",
    )
    coverage: list[str] | None = Field(
        default=None,
        description="Modules considered when computing usages "
        "(defaults to every snapshot module)",
    )

    def covered_modules(self) -> set[str]:
        if self.coverage is not None:
            return set(self.coverage)
        return {module.name for module in self.modules}


class ModuleDescriptor(_Document):
    """The declarative description of one module."""

    schema_version: int = Field(default=DESCRIPTOR_SCHEMA_VERSION)
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    type: str | None = None
    children: list[str] = Field(default_factory=list)
    children_from_subdirectories: bool = False
    executable: bool = False
    interface: bool = False
    aggregate: bool = False
    implements: list[str] = Field(default_factory=list)
    dependencies: list[DependencyDecl] = Field(default_factory=list)
    discover_source_dependencies: bool = False
    auto_inject: AutoInjectionDecl | None = None
    provides: list[ServiceProviderDecl] = Field(default_factory=list)
    required_services: list[str] = Field(default_factory=list)
    optional_services: list[str] = Field(default_factory=list)
    exported_packages: list[str] = Field(default_factory=list)
    resource_packages: list[str] = Field(default_factory=list)
    libraries: list[LibraryDecl] = Field(default_factory=list)
    export_snapshot: ExportSnapshot | None = None

    @property
    def is_automatic(self) -> bool:
        return self.auto_inject is not None and not self.auto_inject.is_empty()


SnapshotModule.model_rebuild()
ExportSnapshot.model_rebuild()
ModuleDescriptor.model_rebuild()


__all__ = [
    "DESCRIPTOR_SCHEMA_VERSION",
    "AutoInjectionDecl",
    "DeclaredDependencyType",
    "DependencyDecl",
    "ExportSnapshot",
    "LibraryDecl",
    "ModuleDescriptor",
    "ServiceProviderDecl",
    "SnapshotModule",
]
