"""Dependency classification and closure computation.

Dependencies of a module are computed in stages, each one a cached sequence
built from the previous ones:

``declared``
    Explicit descriptor edges, source edges discovered from package usage
    (when the descriptor opts in) and, for an executable, the edge to the
    application module it runs.
``direct_without_implicit``
    Declared edges plus the platform emulation an executable needs.
``transitive_without_implicit``
    Breadth-first closure of the previous stage, one edge per destination.
``direct_before_final``
    Adds ``IMPLICIT_PROVIDER`` edges: modules injected by their auto-injection
    conditions and, for executables, the selected service providers.
``transitive_before_final``
    Breadth-first closure of the previous stage, so a provider chosen for a
    dependency is part of its consumer's closure too.
``direct`` / ``transitive``
    Final edges: executable-target edges are hoisted or dropped, and interface
    modules are completed with their implementation for executables.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from modules.dependency import DependencyType, ModuleDependency
from modules.models import ProjectModule
from modules.specific import (
    DESKTOP_EXECUTABLE_EMULATION,
    MEDIA_EMULATION,
    WEB_EXECUTABLE_EMULATION,
    is_emulation_module_name,
)
from modules.target import Target, TargetTag
from resolve.providers import collect_executable_providers
from stream.sequence import Sequence
from utils import application_module_name

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from modules.models import Module
    from registry.registry import ModuleRegistry
    from resolve.providers import Providers
    from stream.sequence import CachedSequence

logger = logging.getLogger(__name__)

JAVA_TIME_PACKAGE = "java.time"
WEB_TIME_EMULATION = "gwt-time"
NATIVE_MEDIA_MODULE = "javafx-media"


def executable_target_applies(dependency: ModuleDependency, module: ProjectModule) -> bool:
    """Whether an edge survives in ``module``'s final dependencies."""
    target = dependency.executable_target
    if target is None:
        return True
    return module.is_executable() and target.grade_target_match(module.target) >= 0


def destinations(dependencies: Iterable[ModuleDependency]) -> list[str]:
    """Destination names in first-seen order."""
    return list(dict.fromkeys(dependency.destination for dependency in dependencies))


class DependencyResolver:
    """Computes and caches the dependency stages of the modules of a registry."""

    def __init__(self, registry: ModuleRegistry) -> None:
        self.registry = registry
        self._stages: dict[tuple[str, str], CachedSequence] = {}

    def _cached(
        self,
        stage: str,
        module: ProjectModule,
        compute: Callable[[ProjectModule], Iterable],
    ) -> CachedSequence:
        key = (stage, module.name)
        sequence = self._stages.get(key)
        if sequence is None:
            sequence = Sequence.create(lambda: compute(module)).cache()
            self._stages[key] = sequence
        return sequence

    def _project(self, name: str) -> ProjectModule | None:
        module = self.registry.get(name)
        return module if isinstance(module, ProjectModule) else None

    # Declared

    def declared_dependencies(self, module: ProjectModule) -> CachedSequence[ModuleDependency]:
        return self._cached("declared", module, self._compute_declared)

    def _compute_declared(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        declared: set[str] = set()
        for decl in module.descriptor.dependencies:
            self.registry.get(decl.name)
            declared.add(decl.name)
            executable_target = (
                Target(TargetTag.parse(decl.executable_target))
                if decl.executable_target
                else None
            )
            yield ModuleDependency(
                module.name,
                decl.name,
                DependencyType(decl.type),
                optional=decl.optional,
                transitive=decl.transitive,
                scope=decl.scope,
                classifier=decl.classifier,
                executable_target=executable_target,
            )

        if module.descriptor.discover_source_dependencies:
            for package in module.used_packages:
                provider = self.registry.module_declaring_package(package, module)
                if provider == module or provider.name in declared:
                    continue
                declared.add(provider.name)
                yield ModuleDependency(module.name, provider.name)

        if module.is_executable():
            application = application_module_name(module.name)
            if application is not None and application not in declared:
                candidate = self.registry.find(application)
                if isinstance(candidate, ProjectModule) and candidate != module:
                    yield ModuleDependency.application(module.name, application)

    def _declared_closure(self, module: ProjectModule) -> list[Module]:
        reached: dict[str, Module] = {}
        pending: deque[ProjectModule] = deque([module])
        while pending:
            current = pending.popleft()
            for dependency in self.declared_dependencies(current).to_list():
                if dependency.destination in reached or dependency.destination == module.name:
                    continue
                destination = self.registry.get(dependency.destination)
                reached[destination.name] = destination
                if isinstance(destination, ProjectModule):
                    pending.append(destination)
        return list(reached.values())

    # Emulation

    def emulation_dependencies(self, module: ProjectModule) -> CachedSequence[ModuleDependency]:
        return self._cached("emulation", module, self._compute_emulation)

    def _compute_emulation(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        if not module.is_executable():
            return
        build_info = module.build_info
        closure = self._declared_closure(module)
        closure_names = {m.name for m in closure}
        if build_info.for_web:
            uses_time = module.uses_package(JAVA_TIME_PACKAGE) or any(
                isinstance(m, ProjectModule) and m.uses_package(JAVA_TIME_PACKAGE)
                for m in closure
            )
            names = [
                name
                for name in WEB_EXECUTABLE_EMULATION
                if name != WEB_TIME_EMULATION or uses_time
            ]
        elif build_info.for_desktop:
            names = list(DESKTOP_EXECUTABLE_EMULATION)
            if closure_names & {NATIVE_MEDIA_MODULE, MEDIA_EMULATION}:
                names.append(MEDIA_EMULATION)
        else:
            names = [m.name for m in closure if is_emulation_module_name(m.name)]
        for name in names:
            if name == module.name or self.registry.find(name) is None:
                continue
            yield ModuleDependency(module.name, name, DependencyType.EMULATION)

    # Without implicit providers

    def direct_dependencies_without_implicit(
        self, module: ProjectModule
    ) -> CachedSequence[ModuleDependency]:
        return self._cached(
            "direct_without_implicit",
            module,
            lambda m: Sequence.concat_all(
                self.declared_dependencies(m), self.emulation_dependencies(m)
            ),
        )

    def transitive_dependencies_without_implicit(
        self, module: ProjectModule
    ) -> CachedSequence[ModuleDependency]:
        return self._cached(
            "transitive_without_implicit",
            module,
            lambda m: self._closure(m, self.direct_dependencies_without_implicit),
        )

    def transitive_project_modules_without_implicit(
        self, module: ProjectModule
    ) -> list[ProjectModule]:
        found = (
            self._project(name)
            for name in destinations(self.transitive_dependencies_without_implicit(module))
        )
        return [m for m in found if m is not None]

    def _closure(
        self,
        module: ProjectModule,
        expand: Callable[[ProjectModule], Sequence[ModuleDependency]],
    ) -> Iterator[ModuleDependency]:
        """Breadth-first closure keeping the first edge reaching each module.

        The UI toolkit emulation modules are reached but not expanded, unless
        the module is a web executable which needs them entirely.
        """
        expand_emulation = module.is_executable() and module.build_info.for_web
        visited = {module.name}
        pending: deque[list[ModuleDependency]] = deque([expand(module).to_list()])
        while pending:
            for dependency in pending.popleft():
                name = dependency.destination
                if name in visited:
                    continue
                visited.add(name)
                yield dependency
                if is_emulation_module_name(name) and not expand_emulation:
                    continue
                destination = self._project(name)
                if destination is not None:
                    pending.append(expand(destination).to_list())

    # Search scope

    def search_scope(self, module: ProjectModule) -> CachedSequence[ProjectModule]:
        """Modules searched for auto-injected modules, providers and
        implementations: the module's closure, its own tree, then the library
        trees matching the configured prefixes.
        """
        return self._cached("scope", module, self._compute_search_scope)

    def _compute_search_scope(self, module: ProjectModule) -> Sequence[ProjectModule]:
        prefixes = tuple(self.registry.config.provider_search_prefixes)
        library_trees = (
            self.registry.project_modules.filter(
                lambda m: m.parent_name is None
                and m != module.root
                and m.name.startswith(prefixes)
            ).flat_map(lambda root: root.this_and_children_in_depth)
        )
        return (
            Sequence.from_iterable(self.transitive_project_modules_without_implicit(module))
            .concat(module.root.this_and_children_in_depth, library_trees)
            .filter(lambda m: not m.is_aggregate)
            .filter(lambda m: m.is_compatible_with(module.target))
            .distinct(key=lambda m: m.name)
        )

    # Implicit providers

    def _matches_auto_injection(
        self,
        candidate: ProjectModule,
        users: list[ProjectModule],
    ) -> bool:
        conditions = candidate.descriptor.auto_inject
        if conditions is None or conditions.is_empty():
            return False
        return (
            all(any(u.uses_package(p) for u in users) for p in conditions.packages)
            and all(any(u.uses_class(c) for u in users) for c in conditions.classes)
            and all(any(u.uses_service(s) for u in users) for s in conditions.services)
        )

    def auto_injected_modules(self, module: ProjectModule) -> CachedSequence[ProjectModule]:
        """Modules injected into ``module`` by their auto-injection conditions.

        The module's own usage is matched; for an executable, the usage of
        every module of its closure counts as well.
        """
        return self._cached("auto_injected", module, self._compute_auto_injected)

    def _compute_auto_injected(self, module: ProjectModule) -> Iterator[ProjectModule]:
        users = [module]
        if module.is_executable():
            users.extend(self.transitive_project_modules_without_implicit(module))
        reached = set(destinations(self.transitive_dependencies_without_implicit(module)))
        for candidate in self.search_scope(module):
            if candidate == module or candidate.name in reached:
                continue
            if not self._matches_auto_injection(candidate, users):
                continue
            candidate_closure = destinations(
                self.transitive_dependencies_without_implicit(candidate)
            )
            if module.name in candidate_closure:
                continue
            logger.debug("Auto-injecting %s into %s", candidate.name, module.name)
            yield candidate

    def executable_providers(self, module: ProjectModule) -> CachedSequence[Providers]:
        return self._cached(
            "providers", module, lambda m: collect_executable_providers(self, m)
        )

    def implicit_provider_dependencies(
        self, module: ProjectModule
    ) -> CachedSequence[ModuleDependency]:
        return self._cached("implicit", module, self._compute_implicit)

    def _compute_implicit(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        reached = set(destinations(self.transitive_dependencies_without_implicit(module)))
        emitted: set[str] = set()
        provided = [m.name for m in self.auto_injected_modules(module)]
        for providers in self.executable_providers(module):
            provided.extend(providers.modules)
        for name in provided:
            if name == module.name or name in reached or name in emitted:
                continue
            emitted.add(name)
            yield ModuleDependency.implicit_provider(module.name, name)

    # Before final resolution

    def direct_dependencies_before_final(
        self, module: ProjectModule
    ) -> CachedSequence[ModuleDependency]:
        return self._cached(
            "direct_before_final",
            module,
            lambda m: Sequence.concat_all(
                self.direct_dependencies_without_implicit(m),
                self.implicit_provider_dependencies(m),
            ),
        )

    def transitive_dependencies_before_final(
        self, module: ProjectModule
    ) -> CachedSequence[ModuleDependency]:
        return self._cached(
            "transitive_before_final",
            module,
            lambda m: self._closure(m, self.direct_dependencies_before_final),
        )

    # Interfaces

    def resolve_implementation(
        self, interface: ProjectModule, consumer: ProjectModule
    ) -> ProjectModule | None:
        """The best-graded implementation of ``interface`` for ``consumer``.

        An interface declaring itself among its implemented interfaces is its
        own fallback implementation.
        """
        target = consumer.target
        candidates = self.search_scope(consumer).filter(
            lambda m: m.implements(interface.name) and m != interface
        )
        best = candidates.max_by(lambda m: m.grade_target_match(target))
        if best is None and interface.implements(interface.name):
            if interface.is_compatible_with(target):
                return interface
        return best

    def _with_implementations(
        self,
        module: ProjectModule,
        dependencies: Iterable[ModuleDependency],
        *,
        with_closure: bool,
    ) -> Iterator[ModuleDependency]:
        resolved: set[str] = set()
        pending = deque(dependencies)
        while pending:
            dependency = pending.popleft()
            yield dependency
            interface = self._project(dependency.destination)
            if interface is None or not interface.is_interface:
                continue
            if interface.name in resolved:
                continue
            resolved.add(interface.name)
            implementation = self.resolve_implementation(interface, module)
            if implementation is None:
                msg = (
                    f"No concrete module found for interface module {interface.name} "
                    f"in executable module {module.name}"
                )
                if module.is_local:
                    logger.warning(msg)
                else:
                    logger.debug(msg)
                continue
            if implementation == interface:
                continue
            pending.append(ModuleDependency.implicit_provider(module.name, implementation.name))
            if with_closure:
                pending.extend(self.transitive_dependencies_before_final(implementation))

    # Final

    def direct_dependencies(self, module: ProjectModule) -> CachedSequence[ModuleDependency]:
        """Final direct dependencies, as written into build descriptors."""
        return self._cached("direct", module, self._compute_direct)

    def _compute_direct(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        direct = self.direct_dependencies_before_final(module).to_list()
        hoisted = [
            dependency.with_source(module.name)
            for dependency in self.transitive_dependencies_before_final(module)
            if dependency.executable_target is not None
            and dependency.source != module.name
        ]
        dependencies: Iterable[ModuleDependency] = [*direct, *hoisted]
        if module.is_executable():
            dependencies = self._with_implementations(
                module, dependencies, with_closure=False
            )
        for dependency in dependencies:
            if executable_target_applies(dependency, module):
                yield dependency

    def transitive_dependencies(self, module: ProjectModule) -> CachedSequence[ModuleDependency]:
        """Final closure, one edge per destination module."""
        return self._cached("transitive", module, self._compute_transitive)

    def _compute_transitive(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        dependencies: Iterable[ModuleDependency] = (
            dependency
            for dependency in self.transitive_dependencies_before_final(module)
            if executable_target_applies(dependency, module)
        )
        if module.is_executable():
            dependencies = self._with_implementations(
                module, dependencies, with_closure=True
            )
        seen = {module.name}
        for dependency in dependencies:
            if dependency.destination in seen:
                continue
            if not executable_target_applies(dependency, module):
                continue
            seen.add(dependency.destination)
            yield dependency

    def visible_dependencies(self, module: ProjectModule) -> CachedSequence[ModuleDependency]:
        """Edges whose destination the module's code may reference.

        Direct destinations are visible; beyond them, only edges declared
        ``transitive`` carry visibility on to the next consumer.
        """
        return self._cached("visible", module, self._compute_visible)

    def _compute_visible(self, module: ProjectModule) -> Iterator[ModuleDependency]:
        seen = {module.name}
        pending: deque[ModuleDependency] = deque(self.direct_dependencies(module))
        while pending:
            dependency = pending.popleft()
            if dependency.destination in seen:
                continue
            seen.add(dependency.destination)
            yield dependency
            destination = self._project(dependency.destination)
            if destination is None:
                continue
            pending.extend(
                exported
                for exported in self.declared_dependencies(destination)
                if exported.transitive
            )

    # Convenience

    def direct_modules(self, module: ProjectModule) -> list[Module]:
        return [self.registry.get(name) for name in destinations(self.direct_dependencies(module))]

    def transitive_modules(self, module: ProjectModule) -> list[Module]:
        return [
            self.registry.get(name)
            for name in destinations(self.transitive_dependencies(module))
        ]

    def depends_directly_on(self, module: ProjectModule, name: str) -> bool:
        return self.direct_dependencies(module).any_match(lambda d: d.destination == name)


__all__ = [
    "DependencyResolver",
    "destinations",
    "executable_target_applies",
]
