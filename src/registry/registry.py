"""The module registry.

One registry value is created per run and owns every module by name. Modules
are registered lazily:

1. modules already registered are returned from the arena;
2. built-in platform modules come from a fixed catalog;
3. otherwise the pending tree walks are continued (local trees first, then the
   published trees of libraries declared by the modules walked so far) until
   the name shows up or there is nothing left to walk.

Every project module the walks register is appended to a growing registration
stream, so independent queries share one discovery process instead of
re-walking the trees.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, cast

from contract.coordinates import ArtifactCoordinates
from modules.errors import (
    AmbiguousResolutionError,
    MalformedDescriptorError,
    UnresolvedModuleError,
)
from modules.models import (
    DevProjectModule,
    ImportedProjectModule,
    LibraryModule,
    Module,
    ModuleKind,
    ProjectModule,
    PublishedProjectModule,
    RootModule,
)
from registry.platform import platform_modules
from scan.files import find_module_directories
from store.descriptors import FileDescriptorStore
from store.repository import MavenRepositoryClient
from store.usage import FileUsageAnalyzer
from stream.growing import GrowingSource

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from contract.descriptors import ModuleDescriptor, SnapshotModule
    from contract.ports import DescriptorSource, RepositoryClient, UsageAnalyzer
    from contract.usage import StaticUsage
    from modules.target import Platform
    from settings.config import FxBuildConfig
    from stream.sequence import Sequence

logger = logging.getLogger(__name__)

PUBLISHED_DESCRIPTOR_CLASSIFIER = "fxbuild"
PUBLISHED_DESCRIPTOR_EXTENSION = "json"


class ModuleRegistry:
    """Creates, identifies and enumerates the modules of one run."""

    def __init__(
        self,
        workspace: Path,
        config: FxBuildConfig,
        *,
        descriptors: DescriptorSource | None = None,
        usage_analyzer: UsageAnalyzer | None = None,
        repository: RepositoryClient | None = None,
    ) -> None:
        self.workspace = workspace
        self.config = config
        self.descriptors: DescriptorSource = descriptors or FileDescriptorStore(
            config.descriptor_filename
        )
        self.usage_analyzer: UsageAnalyzer = usage_analyzer or FileUsageAnalyzer(
            config.usage_filename
        )
        self.repository: RepositoryClient = repository or MavenRepositoryClient(
            config.repository
        )

        self._modules: dict[str, Module] = {}
        self._catalog: dict[str, LibraryModule] = {
            module.name: module for module in platform_modules()
        }
        self._dev_by_home: dict[Path, DevProjectModule] = {}

        self._pending_walks: deque[Iterator[ProjectModule]] = deque()
        self._library_owners: deque[ProjectModule] = deque()
        self._walked: set[str] = set()
        self._registered: GrowingSource[ProjectModule] = GrowingSource(
            self._register_next
        )

        self._libraries: list[LibraryModule] = []
        self._indexed_libraries = 0
        self._package_index: dict[str, list[Module]] = {}
        self._index_cursor = self._registered.cursor()
        for module in self._catalog.values():
            self._declare_packages(module, module.exported_packages)

    # Arena

    def _register(self, module: Module) -> Module:
        existing = self._modules.setdefault(module.name, module)
        if existing is not module:
            logger.debug(
                "Module %s already registered as %s; keeping the first one",
                module.name,
                existing.kind.value,
            )
            return existing
        logger.debug("Registered %s module %s", module.kind.value, module.name)
        return module

    def find(self, name: str) -> Module | None:
        """Return the module named ``name``, registering it on first lookup."""
        module = self._modules.get(name)
        if module is not None:
            return module
        catalog_module = self._catalog.get(name)
        if catalog_module is not None:
            return self._register(catalog_module)
        while name not in self._modules:
            if self._registered.advance() is None:
                return None
        return self._modules[name]

    def get(self, name: str) -> Module:
        module = self.find(name)
        if module is None:
            raise UnresolvedModuleError(name)
        return module

    def get_project_module(self, name: str) -> ProjectModule:
        module = self.get(name)
        if not module.is_project:
            raise UnresolvedModuleError(name, f"{module.kind.value} module, not a project module")
        return cast("ProjectModule", module)

    def is_registered(self, name: str) -> bool:
        return name in self._modules

    # Module factories

    def add_root(self, module: ProjectModule) -> ProjectModule:
        """Register a tree root and schedule the walk of its tree."""
        registered = self._register(module)
        if registered is module:
            self._pending_walks.append(iter(module.this_and_children_in_depth))
        return cast("ProjectModule", registered)

    def open_root(self, home: Path) -> RootModule:
        """Register the local tree rooted at ``home``."""
        home = home.resolve()
        existing = self._dev_by_home.get(home)
        if isinstance(existing, RootModule):
            return existing
        if not self.descriptors.exists(home):
            raise UnresolvedModuleError(home.name, f"no descriptor in {home}")
        root = RootModule(home.name, self, home=home)
        self._dev_by_home[home] = root
        return cast("RootModule", self.add_root(root))

    def dev_module(self, home: Path, *, parent: ProjectModule | None = None) -> ProjectModule:
        home = home.resolve()
        existing = self._dev_by_home.get(home)
        if existing is not None:
            return existing
        module = DevProjectModule(
            home.name,
            self,
            home=home,
            parent=parent.name if parent is not None else None,
        )
        registered = self._register(module)
        if registered is module:
            self._dev_by_home[home] = module
        return cast("ProjectModule", registered)

    def published_module(
        self,
        name: str,
        *,
        parent: PublishedProjectModule | None = None,
        coordinates: ArtifactCoordinates | None = None,
    ) -> ProjectModule:
        if coordinates is None:
            if parent is None:
                raise UnresolvedModuleError(name, "published module without coordinates")
            inherited = parent.published_coordinates
            coordinates = ArtifactCoordinates(inherited.group_id, name, inherited.version)
        module = PublishedProjectModule(
            name,
            self,
            coordinates=coordinates,
            parent=parent.name if parent is not None else None,
        )
        return cast("ProjectModule", self._register(module))

    def imported_module(
        self,
        snapshot_module: SnapshotModule,
        *,
        parent: ProjectModule,
        owner: str,
    ) -> ProjectModule:
        module = ImportedProjectModule(
            snapshot_module, self, owner=owner, parent=parent.name
        )
        return cast("ProjectModule", self._register(module))

    def child_directories(self, module: DevProjectModule) -> list[Path]:
        """Homes of the children a dev module declares (or holds, if so configured)."""
        descriptor = module.descriptor
        homes: list[Path] = []
        for child_name in descriptor.children:
            child_home = module.home / child_name
            if not self.descriptors.exists(child_home):
                raise UnresolvedModuleError(
                    child_name, f"declared as a child of {module.name} but {child_home} has no descriptor"
                )
            homes.append(child_home)
        if descriptor.children_from_subdirectories:
            for child_home in find_module_directories(
                module.home,
                descriptor_filename=self.config.descriptor_filename,
                output_dir=self.config.output_dir,
                exclude_patterns=self.config.exclude,
                nested_gitignore=self.config.nested_gitignore,
            ):
                if child_home not in homes:
                    homes.append(child_home)
        return homes

    def fetch_published_descriptor(self, module: PublishedProjectModule) -> ModuleDescriptor:
        coordinates = module.published_coordinates
        if coordinates.group_id is None:
            raise MalformedDescriptorError(module.name, "groupId")
        if coordinates.version is None:
            raise MalformedDescriptorError(module.name, "version")
        path = self.repository.download(
            coordinates,
            classifier=PUBLISHED_DESCRIPTOR_CLASSIFIER,
            extension=PUBLISHED_DESCRIPTOR_EXTENSION,
        )
        logger.debug("Reading published descriptor of %s from %s", module.name, path)
        return self.descriptors.read_file(path)

    # Registration stream

    def _register_next(self) -> ProjectModule | None:
        while True:
            while self._pending_walks:
                module = next(self._pending_walks[0], None)
                if module is None:
                    self._pending_walks.popleft()
                elif module.name not in self._walked:
                    self._walked.add(module.name)
                    self._library_owners.append(module)
                    return module
            if not self._library_owners:
                return None
            self._import_libraries(self._library_owners.popleft())

    def _import_libraries(self, owner: ProjectModule) -> None:
        for decl in owner.descriptor.libraries:
            if decl.name in self._modules or decl.name in self._catalog:
                continue
            library = LibraryModule.from_decl(decl)
            if not library.should_be_downloaded:
                self._register(library)
                self._libraries.append(library)
                continue
            home = self.workspace / decl.name
            module: ProjectModule
            if self.descriptors.exists(home):
                logger.debug("Using local tree %s for library %s", home, decl.name)
                local = DevProjectModule(decl.name, self, home=home.resolve())
                self._dev_by_home[local.home] = local
                module = local
            else:
                module = PublishedProjectModule(
                    decl.name, self, coordinates=library.coordinates()
                )
            self.add_root(module)

    @property
    def project_modules(self) -> Sequence[ProjectModule]:
        """Every project module, replaying the registered ones before walking on."""
        return self._registered.replay()

    @property
    def registered_project_modules(self) -> tuple[ProjectModule, ...]:
        return self._registered.items

    def registration_cursor(self) -> Sequence[ProjectModule]:
        """A stream continuing where its previous enumeration stopped."""
        return self._registered.cursor()

    def find_starting_with(self, prefix: str) -> Sequence[ProjectModule]:
        return self.project_modules.filter(lambda module: module.name.startswith(prefix))

    @property
    def libraries(self) -> tuple[LibraryModule, ...]:
        return tuple(self._libraries)

    # Package index

    def _declare_packages(self, module: Module, packages: tuple[str, ...]) -> None:
        for package in packages:
            declarers = self._package_index.setdefault(package, [])
            if module in declarers:
                continue
            if declarers:
                msg = (
                    f"Package {package} is declared in both {declarers[0].name} "
                    f"and {module.name}"
                )
                if _is_local(declarers[0]) or _is_local(module):
                    logger.warning(msg)
                else:
                    logger.debug(msg)
            declarers.append(module)

    def _index_all(self) -> None:
        for module in self._index_cursor:
            self._declare_packages(module, module.exported_packages)
        while self._indexed_libraries < len(self._libraries):
            library = self._libraries[self._indexed_libraries]
            self._declare_packages(library, library.exported_packages)
            self._indexed_libraries += 1

    def modules_declaring_package(self, package: str) -> tuple[Module, ...]:
        self._index_all()
        return tuple(self._package_index.get(package, ()))

    def module_declaring_package(self, package: str, consumer: ProjectModule) -> Module:
        """The module a consumer should depend on to use ``package``."""
        if package in consumer.declared_packages:
            return consumer
        reasons: list[str] = []
        for candidate in self.modules_declaring_package(package):
            reason = unsuitable_reason(candidate, consumer)
            if reason is None:
                return candidate
            reasons.append(f"{candidate.name} declares this package, but {reason}")
        raise UnresolvedModuleError.for_package(package, consumer.name, reasons)

    # Usage

    def usage_of(self, module: ProjectModule) -> StaticUsage:
        return self.usage_analyzer.usage(module.name, module.home)

    def snapshot_usage(self, module: ProjectModule, key: str) -> bool | None:
        """Whether an export snapshot tells ``module`` uses a package or class.

        None when no snapshot covers the module.
        """
        if isinstance(module, ImportedProjectModule):
            owner = self.get_project_module(module.snapshot_owner)
        elif module.kind is ModuleKind.PUBLISHED:
            owner = module
        else:
            return None
        snapshot = owner.descriptor.export_snapshot
        if snapshot is None:
            return None
        if module.name in snapshot.usages.get(key, ()):
            return True
        if module.name in snapshot.covered_modules():
            return False
        return None

    # Executables

    def select_executable(self, tree: ProjectModule, platform: Platform) -> ProjectModule:
        """The unique executable module of ``tree`` built for ``platform``."""
        candidates = tree.this_and_children_in_depth.filter(
            lambda module: module.is_executable(platform)
        ).to_list()
        if not candidates:
            raise UnresolvedModuleError(
                f"{tree.name} executable", f"no executable module for {platform.value}"
            )
        if len(candidates) > 1:
            raise AmbiguousResolutionError(
                f"{platform.value} executable in {tree.name}",
                [module.name for module in candidates],
            )
        return candidates[0]

    # Rename

    def rename(self, module: DevProjectModule, new_name: str) -> DevProjectModule:
        """Rename a local module: its directory, its arena key and the
        descriptors referring to it.
        """
        old_name = module.name
        if new_name == old_name:
            return module
        if self.find(new_name) is not None:
            msg = f"Cannot rename {old_name}: module {new_name} already exists"
            raise ValueError(msg)
        new_home = module.home.parent / new_name
        if new_home.exists():
            msg = f"Cannot rename {old_name}: {new_home} already exists"
            raise FileExistsError(msg)

        dependents = [
            other
            for other in module.root.this_and_children_in_depth
            if isinstance(other, DevProjectModule)
            and other is not module
            and any(d.name == old_name for d in other.descriptor.dependencies)
        ]
        children = module.children.to_list()
        descendants = [
            descendant
            for descendant in module.children_in_depth
            if isinstance(descendant, DevProjectModule)
        ]

        old_home = module.home
        old_home.rename(new_home)
        del self._modules[old_name]
        del self._dev_by_home[old_home]
        module.name = new_name
        module.home = new_home
        module.invalidate()
        self._modules[new_name] = module
        self._dev_by_home[new_home] = module
        for child in children:
            child.parent_name = new_name
        for descendant in descendants:
            relocated = new_home / descendant.home.relative_to(old_home)
            self._dev_by_home.pop(descendant.home, None)
            descendant.home = relocated
            self._dev_by_home[relocated] = descendant
        self._walked.discard(old_name)
        self._walked.add(new_name)

        if module.descriptor.artifact_id == old_name:
            module.save_descriptor(module.descriptor.model_copy(update={"artifact_id": new_name}))

        parent = module.parent
        if isinstance(parent, DevProjectModule) and old_name in parent.descriptor.children:
            children_names = [
                new_name if name == old_name else name for name in parent.descriptor.children
            ]
            parent.save_descriptor(
                parent.descriptor.model_copy(update={"children": children_names})
            )

        for dependent in dependents:
            dependencies = [
                d.model_copy(update={"name": new_name}) if d.name == old_name else d
                for d in dependent.descriptor.dependencies
            ]
            dependent.save_descriptor(
                dependent.descriptor.model_copy(update={"dependencies": dependencies})
            )

        logger.info("Renamed %s to %s", old_name, new_name)
        return module


def _is_local(module: Module) -> bool:
    return isinstance(module, ProjectModule) and module.is_local


def unsuitable_reason(candidate: Module, consumer: ProjectModule) -> str | None:
    """Why ``candidate`` must not be used by ``consumer`` (None when suitable)."""
    if not isinstance(candidate, ProjectModule):
        return None
    if candidate.is_implementing_interface and not consumer.is_executable():
        if not consumer.provided_services:
            interface = candidate.implemented_interfaces[0]
            return (
                f"it implements an interface module ({interface}), and only "
                f"executable modules should use it ({consumer.name} is not executable)"
            )
    if candidate.is_interface and consumer.name.startswith(candidate.name):
        return f"it should not be included in {consumer.name}"
    return None


__all__ = [
    "PUBLISHED_DESCRIPTOR_CLASSIFIER",
    "PUBLISHED_DESCRIPTOR_EXTENSION",
    "ModuleRegistry",
    "unsuitable_reason",
]
