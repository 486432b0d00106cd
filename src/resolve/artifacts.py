"""Mapping of modules to the published artifacts that materialize them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from contract.coordinates import ArtifactCoordinates
from modules.build_info import BuildInfo
from modules.dependency import DependencyType
from modules.models import ModuleKind, ProjectModule
from modules.specific import (
    CATALOG_REDIRECTS,
    EMULATION_TO_NATIVE,
    PLATFORM_EMULATION_ARTIFACTS,
    RUNTIME_SCOPED_MODULES,
    SOURCES_CLASSIFIER_EXCLUDED,
    SOURCES_CLASSIFIER_EXCLUDED_PREFIXES,
    UI_TOOLKIT_MODULES,
    WEB_EXECUTABLE_DROPPED,
    WEB_EXECUTABLE_SUBSTITUTES,
    is_emulation_module_name,
    is_platform_module_name,
    is_shaded_emulation_name,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modules.dependency import ModuleDependency
    from modules.models import Module
    from resolve.dependencies import DependencyResolver

logger = logging.getLogger(__name__)

PROVIDED = "provided"
RUNTIME = "runtime"
SOURCES = "sources"
SHADED_SOURCES = "shaded-sources"
POM = "pom"


class ArtifactResolver:
    """Resolves (module, build context) pairs to artifact coordinates.

    Resolution never mutates the graph: the same module and context always
    give the same coordinates.
    """

    def __init__(self, resolver: DependencyResolver) -> None:
        self.resolver = resolver
        self.registry = resolver.registry
        self.config = resolver.registry.config

    # Single module

    def artifact_id(self, module: Module, build: BuildInfo) -> str | None:
        """The artifactId of ``module`` in ``build``, None when no artifact is needed."""
        name = module.name
        web_executable = build.for_web and build.executable

        emulation_artifact = PLATFORM_EMULATION_ARTIFACTS.get(name)
        if emulation_artifact is not None:
            return emulation_artifact if web_executable else None
        if module.kind is ModuleKind.PLATFORM or is_platform_module_name(name):
            return None

        native = EMULATION_TO_NATIVE.get(name)
        if native is not None:
            return name if build.for_web or build.for_catalog else native

        if build.for_catalog and name in CATALOG_REDIRECTS:
            return CATALOG_REDIRECTS[name]

        if web_executable:
            if name in WEB_EXECUTABLE_DROPPED:
                return None
            if name in WEB_EXECUTABLE_SUBSTITUTES:
                return WEB_EXECUTABLE_SUBSTITUTES[name]

        return module.artifact_id or name

    def _coordinate_owner(self, module: Module, artifact_id: str) -> Module | None:
        if artifact_id == module.name:
            return module
        return self.registry.find(artifact_id)

    def group_id(self, module: Module, artifact_id: str) -> str | None:
        owner = self._coordinate_owner(module, artifact_id)
        group_id = owner.group_id if owner is not None else None
        return group_id or self.config.default_group_id(artifact_id)

    def version(self, module: Module, artifact_id: str) -> str | None:
        owner = self._coordinate_owner(module, artifact_id)
        version = owner.version if owner is not None else None
        return version or self.config.default_version(artifact_id)

    def module_coordinates(
        self, module: Module, build: BuildInfo | None = None
    ) -> ArtifactCoordinates | None:
        """Coordinates of a module itself (as opposed to a dependency on it)."""
        if build is None:
            build = (
                module.build_info if isinstance(module, ProjectModule) else BuildInfo.plain()
            )
        artifact_id = self.artifact_id(module, build)
        if artifact_id is None:
            return None
        return ArtifactCoordinates(
            group_id=self.group_id(module, artifact_id),
            artifact_id=artifact_id,
            version=self.version(module, artifact_id),
            type=_type_of(module),
        )

    # Dependency groups

    def _effective_module(self, module: Module, build: BuildInfo, consumer: ProjectModule) -> Module:
        if (
            build.executable
            and isinstance(module, ProjectModule)
            and module.is_interface
            and consumer.is_executable()
        ):
            implementation = self.resolver.resolve_implementation(module, consumer)
            if implementation is not None:
                return implementation
        return module

    def scope(
        self,
        module: Module,
        dependencies: list[ModuleDependency],
        build: BuildInfo,
    ) -> str | None:
        """Scope of a group of edges to the same module.

        The first edge's explicit scope wins. Edges listed first matter: a
        source edge listed before a plugin edge keeps the compile scope.
        """
        if dependencies and dependencies[0].scope is not None:
            return dependencies[0].scope
        if any(dependency.optional for dependency in dependencies):
            return PROVIDED
        if (
            isinstance(module, ProjectModule)
            and module.is_interface
            and not any(d.type is DependencyType.IMPLICIT_PROVIDER for d in dependencies)
        ):
            return PROVIDED
        if build.is_plain:
            if module.name in UI_TOOLKIT_MODULES:
                return PROVIDED
            if module.name in RUNTIME_SCOPED_MODULES:
                return RUNTIME
        return None

    def classifier(
        self,
        module: Module,
        dependencies: list[ModuleDependency],
        build: BuildInfo,
    ) -> str | None:
        for dependency in dependencies:
            if dependency.classifier is not None:
                return dependency.classifier
        if not (build.for_web and build.executable):
            return None
        name = module.name
        if name.startswith(SOURCES_CLASSIFIER_EXCLUDED_PREFIXES):
            return None
        if name in SOURCES_CLASSIFIER_EXCLUDED:
            return None
        return SHADED_SOURCES if is_shaded_emulation_name(name) else SOURCES

    def dependency_coordinates(
        self,
        module: Module,
        dependencies: list[ModuleDependency],
        build: BuildInfo,
        consumer: ProjectModule,
    ) -> ArtifactCoordinates | None:
        """Coordinates declared by ``consumer`` for its edges to ``module``."""
        effective = self._effective_module(module, build, consumer)
        artifact_id = self.artifact_id(effective, build)
        if artifact_id is None:
            return None
        return ArtifactCoordinates(
            group_id=self.group_id(effective, artifact_id),
            artifact_id=artifact_id,
            version=self.version(effective, artifact_id),
            scope=self.scope(effective, dependencies, build),
            classifier=self.classifier(effective, dependencies, build),
            type=_type_of(effective),
        )

    def resolve(
        self,
        consumer: ProjectModule,
        dependencies: Iterable[ModuleDependency],
        build: BuildInfo | None = None,
    ) -> list[ArtifactCoordinates]:
        """Artifact declarations for a consumer's dependency edges.

        Edges are grouped by destination, each group resolved once, then
        de-duplicated by ``groupId:artifactId`` (first wins) and sorted with
        emulation modules first.
        """
        if build is None:
            build = consumer.build_info
        groups: dict[str, list[ModuleDependency]] = {}
        for dependency in dependencies:
            if dependency.destination == consumer.name:
                continue
            groups.setdefault(dependency.destination, []).append(dependency)

        resolved: dict[str, tuple[bool, ArtifactCoordinates]] = {}
        for name, group in groups.items():
            module = self.registry.get(name)
            coordinates = self.dependency_coordinates(module, group, build, consumer)
            if coordinates is None:
                continue
            if coordinates.key in resolved:
                logger.debug(
                    "%s: %s resolves to already declared %s",
                    consumer.name,
                    name,
                    coordinates.key,
                )
                continue
            emulation = is_emulation_module_name(name) or any(
                d.type is DependencyType.EMULATION for d in group
            )
            resolved[coordinates.key] = (emulation, coordinates)

        ordered = sorted(
            resolved.values(),
            key=lambda item: (not item[0], item[1].artifact_id),
        )
        return [coordinates for _, coordinates in ordered]

    def module_artifacts(self, module: ProjectModule) -> list[ArtifactCoordinates]:
        """Artifacts a module's build declares in its own build context.

        A web executable is compiled from sources and lists its whole closure;
        other modules list their direct dependencies.
        """
        build = module.build_info
        if build.executable and build.for_web:
            dependencies = self.resolver.transitive_dependencies(module)
        else:
            dependencies = self.resolver.direct_dependencies(module)
        return self.resolve(module, dependencies, build)


def _type_of(module: Module) -> str | None:
    if module.type is not None:
        return module.type
    if isinstance(module, ProjectModule) and module.is_aggregate:
        return POM
    return None


__all__ = ["ArtifactResolver"]
