"""Module entities.

Every module is owned by the registry that created it and is addressed by
name: parents, children and dependency edges hold names, never references.
The module kinds form a closed set (see ``ModuleKind``); code that needs to
treat a kind differently dispatches on ``module.kind``.

Project modules read everything from a backing descriptor. Descriptor-derived
values are memoized on first access and the descriptor itself is loaded by
the variant (a local file, a downloaded artifact or an embedded snapshot).
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING

from contract.coordinates import ArtifactCoordinates
from modules.build_info import BuildInfo
from modules.errors import MalformedDescriptorError
from modules.target import Platform, Target
from stream.sequence import Sequence
from utils import package_of_class

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from contract.descriptors import (
        LibraryDecl,
        ModuleDescriptor,
        SnapshotModule,
    )
    from contract.usage import StaticUsage
    from registry.registry import ModuleRegistry
    from stream.sequence import CachedSequence

logger = logging.getLogger(__name__)


class ModuleKind(str, Enum):
    """The closed set of module variants."""

    PLATFORM = "platform"
    LIBRARY = "library"
    DEV = "dev"
    ROOT = "root"
    PUBLISHED = "published"
    IMPORTED = "imported"


PROJECT_KINDS = frozenset(
    {ModuleKind.DEV, ModuleKind.ROOT, ModuleKind.PUBLISHED, ModuleKind.IMPORTED}
)
LOCAL_KINDS = frozenset({ModuleKind.DEV, ModuleKind.ROOT})


class Module:
    """A uniquely named unit of the dependency graph."""

    kind: ModuleKind = ModuleKind.LIBRARY

    def __init__(
        self,
        name: str,
        *,
        group_id: str | None = None,
        artifact_id: str | None = None,
        version: str | None = None,
        type: str | None = None,  # noqa: A002
    ) -> None:
        self.name = name
        self._group_id = group_id
        self._artifact_id = artifact_id
        self._version = version
        self._type = type

    @property
    def group_id(self) -> str | None:
        return self._group_id

    @property
    def artifact_id(self) -> str | None:
        return self._artifact_id

    @property
    def version(self) -> str | None:
        return self._version

    @property
    def type(self) -> str | None:
        return self._type

    @property
    def is_project(self) -> bool:
        return self.kind in PROJECT_KINDS

    def coordinates(self) -> ArtifactCoordinates:
        """Declared coordinates, the artifactId defaulting to the name."""
        return ArtifactCoordinates(
            group_id=self.group_id,
            artifact_id=self.artifact_id or self.name,
            version=self.version,
            type=self.type,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Module):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __lt__(self, other: Module) -> bool:
        return self.name < other.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __str__(self) -> str:
        return self.name


class LibraryModule(Module):
    """A third-party or platform module referenced by coordinates."""

    def __init__(
        self,
        name: str,
        *,
        group_id: str | None = None,
        artifact_id: str | None = None,
        version: str | None = None,
        type: str | None = None,  # noqa: A002
        exported_packages: tuple[str, ...] = (),
        platform: bool = False,
        published: bool | None = None,
    ) -> None:
        super().__init__(
            name,
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            type=type,
        )
        self.kind = ModuleKind.PLATFORM if platform else ModuleKind.LIBRARY
        self.exported_packages = exported_packages
        self._published = published

    @classmethod
    def from_decl(cls, decl: LibraryDecl) -> LibraryModule:
        return cls(
            decl.name,
            group_id=decl.group_id,
            artifact_id=decl.artifact_id,
            version=decl.version,
            type=decl.type,
            exported_packages=tuple(decl.exported_packages),
            published=decl.published,
        )

    @property
    def should_be_downloaded(self) -> bool:
        """True when the library is a published module tree to import."""
        if self._published is not None:
            return self._published
        if self.kind is ModuleKind.PLATFORM:
            return False
        has_coordinates = self.group_id is not None and self.version is not None
        return has_coordinates and not self.exported_packages


class ProjectModule(Module):
    """A module belonging to a tree, backed by a descriptor."""

    kind = ModuleKind.DEV

    def __init__(
        self,
        name: str,
        registry: ModuleRegistry,
        *,
        parent: str | None = None,
        home: Path | None = None,
    ) -> None:
        super().__init__(name)
        self.registry = registry
        self.parent_name = parent
        self.home = home
        self.children: CachedSequence[ProjectModule] = Sequence.create(
            self._create_children
        ).cache()

    # Backing document

    def _load_descriptor(self) -> ModuleDescriptor:
        raise NotImplementedError

    def _create_children(self) -> Iterator[ProjectModule]:
        raise NotImplementedError

    @cached_property
    def descriptor(self) -> ModuleDescriptor:
        descriptor = self._load_descriptor()
        logger.debug("Loaded descriptor of %s (%s)", self.name, self.kind.value)
        return descriptor

    @cached_property
    def usage(self) -> StaticUsage:
        return self.registry.usage_of(self)

    # Tree navigation

    @property
    def parent(self) -> ProjectModule | None:
        if self.parent_name is None:
            return None
        return self.registry.get_project_module(self.parent_name)

    @property
    def root(self) -> ProjectModule:
        module: ProjectModule = self
        while module.parent is not None:
            module = module.parent
        return module

    @property
    def this_and_children_in_depth(self) -> Sequence[ProjectModule]:
        return Sequence.of(self).concat(self.children_in_depth)

    @property
    def children_in_depth(self) -> Sequence[ProjectModule]:
        return self.children.flat_map(lambda child: child.this_and_children_in_depth)

    def is_ancestor_of(self, module: ProjectModule) -> bool:
        parent = module.parent
        while parent is not None:
            if parent is self:
                return True
            parent = parent.parent
        return False

    # Coordinates inherit group and version from the parent

    @property
    def group_id(self) -> str | None:
        if self.descriptor.group_id is not None:
            return self.descriptor.group_id
        if self._group_id is not None:
            return self._group_id
        parent = self.parent
        return parent.group_id if parent is not None else None

    @property
    def artifact_id(self) -> str | None:
        return self.descriptor.artifact_id or self._artifact_id

    @property
    def version(self) -> str | None:
        if self.descriptor.version is not None:
            return self.descriptor.version
        if self._version is not None:
            return self._version
        parent = self.parent
        return parent.version if parent is not None else None

    @property
    def type(self) -> str | None:
        return self.descriptor.type or self._type

    # Flags

    @cached_property
    def target(self) -> Target:
        return Target.from_module_name(self.name)

    def is_executable(self, platform: Platform | None = None) -> bool:
        if not self.descriptor.executable:
            return False
        return platform is None or self.target.is_platform_supported(platform)

    @property
    def is_interface(self) -> bool:
        return self.descriptor.interface

    @property
    def is_aggregate(self) -> bool:
        return self.descriptor.aggregate

    @property
    def is_automatic(self) -> bool:
        return self.descriptor.is_automatic

    @property
    def is_local(self) -> bool:
        return self.kind in LOCAL_KINDS

    @property
    def implemented_interfaces(self) -> tuple[str, ...]:
        return tuple(self.descriptor.implements)

    @property
    def is_implementing_interface(self) -> bool:
        return bool(self.descriptor.implements)

    def implements(self, interface: str) -> bool:
        return interface in self.descriptor.implements

    def grade_target_match(self, requested: Target) -> int:
        return self.target.grade_target_match(requested)

    def is_compatible_with(self, requested: Target) -> bool:
        return self.grade_target_match(requested) >= 0

    @property
    def build_info(self) -> BuildInfo:
        return BuildInfo.for_module(self)

    # Packages

    @cached_property
    def declared_packages(self) -> tuple[str, ...]:
        return tuple(self.usage.declared_packages)

    @cached_property
    def exported_packages(self) -> tuple[str, ...]:
        """Packages other modules can use: declared plus explicitly exported."""
        packages = dict.fromkeys(self.declared_packages)
        packages.update(dict.fromkeys(self.descriptor.exported_packages))
        return tuple(packages)

    @cached_property
    def used_packages(self) -> tuple[str, ...]:
        """Used packages, plus the package of every provided service interface."""
        packages = dict.fromkeys(self.usage.packages)
        packages.update(dict.fromkeys(package_of_class(s) for s in self.provided_services))
        packages.pop("", None)
        return tuple(packages)

    def uses_package(self, package: str) -> bool:
        told = self.registry.snapshot_usage(self, package)
        if told is not None:
            return told
        return package in self.used_packages

    def uses_class(self, class_name: str) -> bool:
        told = self.registry.snapshot_usage(self, class_name)
        if told is not None:
            return told
        return self.usage.uses_class(class_name)

    def uses_service(self, spi: str) -> bool:
        return spi in self.required_services or spi in self.optional_services

    # Services

    @cached_property
    def required_services(self) -> tuple[str, ...]:
        services = dict.fromkeys(self.descriptor.required_services)
        services.update(dict.fromkeys(self.usage.required_services))
        return tuple(services)

    @cached_property
    def optional_services(self) -> tuple[str, ...]:
        services = dict.fromkeys(self.descriptor.optional_services)
        services.update(dict.fromkeys(self.usage.optional_services))
        return tuple(s for s in services if s not in self.required_services)

    @cached_property
    def provided_services(self) -> tuple[str, ...]:
        """Sorted service interfaces this module provides implementations for."""
        services = {self._spi_of(i) for i in range(len(self.descriptor.provides))}
        return tuple(sorted(services))

    def _spi_of(self, index: int) -> str:
        decl = self.descriptor.provides[index]
        if decl.spi is None:
            raise MalformedDescriptorError(
                self.name, f"spi of provider {decl.implementation}", self.home
            )
        return decl.spi

    def provides_service(self, spi: str) -> bool:
        return spi in self.provided_services

    def service_implementations(self, spi: str) -> tuple[str, ...]:
        return tuple(
            decl.implementation
            for i, decl in enumerate(self.descriptor.provides)
            if self._spi_of(i) == spi
        )


class DevProjectModule(ProjectModule):
    """A local module backed by an editable descriptor and source directory."""

    kind = ModuleKind.DEV

    def __init__(
        self,
        name: str,
        registry: ModuleRegistry,
        *,
        home: Path,
        parent: str | None = None,
    ) -> None:
        super().__init__(name, registry, parent=parent, home=home)
        self.home: Path = home

    def _load_descriptor(self) -> ModuleDescriptor:
        return self.registry.descriptors.read(self.home)

    def _create_children(self) -> Iterator[ProjectModule]:
        for child_home in self.registry.child_directories(self):
            yield self.registry.dev_module(child_home, parent=self)

    def save_descriptor(self, descriptor: ModuleDescriptor) -> None:
        """Persist a rewritten descriptor and drop values derived from the old one."""
        self.registry.descriptors.write(self.home, descriptor)
        self.invalidate()
        self.__dict__["descriptor"] = descriptor

    def invalidate(self) -> None:
        for attr in (
            "descriptor",
            "usage",
            "target",
            "declared_packages",
            "exported_packages",
            "used_packages",
            "required_services",
            "optional_services",
            "provided_services",
        ):
            self.__dict__.pop(attr, None)

    def rename(self, new_name: str) -> DevProjectModule:
        return self.registry.rename(self, new_name)


class RootModule(DevProjectModule):
    """A local module without parent; owns the caches of its tree analyses."""

    kind = ModuleKind.ROOT

    def __init__(self, name: str, registry: ModuleRegistry, *, home: Path) -> None:
        super().__init__(name, registry, home=home)
        self.analysis_cache: dict[str, object] = {}


class PublishedProjectModule(ProjectModule):
    """A module resolved from a binary repository; read-only.

    Its descriptor is downloaded on first access when no local copy exists.
    When the tree's root embeds an export snapshot, children are rebuilt
    from it instead of downloading their own descriptors.
    """

    kind = ModuleKind.PUBLISHED

    def __init__(
        self,
        name: str,
        registry: ModuleRegistry,
        *,
        coordinates: ArtifactCoordinates,
        parent: str | None = None,
    ) -> None:
        super().__init__(name, registry, parent=parent)
        self.published_coordinates = coordinates
        self._group_id = coordinates.group_id
        self._artifact_id = coordinates.artifact_id
        self._version = coordinates.version
        self._type = coordinates.type

    def _load_descriptor(self) -> ModuleDescriptor:
        return self.registry.fetch_published_descriptor(self)

    def _create_children(self) -> Iterator[ProjectModule]:
        snapshot = self.descriptor.export_snapshot
        if snapshot is not None:
            for snapshot_module in snapshot.modules:
                if snapshot_module.parent == self.name:
                    yield self.registry.imported_module(
                        snapshot_module, parent=self, owner=self.name
                    )
            return
        for child_name in self.descriptor.children:
            yield self.registry.published_module(child_name, parent=self)


class ImportedProjectModule(ProjectModule):
    """A module rebuilt from the export snapshot embedded in its tree's root."""

    kind = ModuleKind.IMPORTED

    def __init__(
        self,
        snapshot_module: SnapshotModule,
        registry: ModuleRegistry,
        *,
        owner: str,
        parent: str | None = None,
    ) -> None:
        super().__init__(snapshot_module.name, registry, parent=parent)
        self.snapshot_owner = owner
        self._snapshot_module = snapshot_module

    def _load_descriptor(self) -> ModuleDescriptor:
        return self._snapshot_module.descriptor

    def _create_children(self) -> Iterator[ProjectModule]:
        owner = self.registry.get_project_module(self.snapshot_owner)
        snapshot = owner.descriptor.export_snapshot
        if snapshot is None:
            return
        for snapshot_module in snapshot.modules:
            if snapshot_module.parent == self.name:
                yield self.registry.imported_module(
                    snapshot_module, parent=self, owner=self.snapshot_owner
                )


__all__ = [
    "LOCAL_KINDS",
    "PROJECT_KINDS",
    "DevProjectModule",
    "ImportedProjectModule",
    "LibraryModule",
    "Module",
    "ModuleKind",
    "ProjectModule",
    "PublishedProjectModule",
    "RootModule",
]
