"""Service provider selection for executable modules.

An executable must ship one implementation of every service its code (or any
module it ends up with) requires, and every implementation found for the
services it optionally uses. Providers bring their own dependencies and may
use further services, so collection repeats until nothing new shows up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modules.models import ProjectModule
    from resolve.dependencies import DependencyResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Providers:
    """The modules selected to provide one service interface."""

    spi: str
    modules: tuple[str, ...]
    required: bool


def find_modules_providing(
    scope: Iterable[ProjectModule],
    spi: str,
    consumer: ProjectModule,
) -> list[ProjectModule]:
    """Modules of ``scope`` providing ``spi`` and compatible with the consumer."""
    found: list[ProjectModule] = []
    for module in scope:
        if module in found:
            continue
        if module.provides_service(spi) and module.is_compatible_with(consumer.target):
            found.append(module)
    return found


def pick_best_provider(
    candidates: list[ProjectModule],
    consumer: ProjectModule,
) -> ProjectModule | None:
    """Choose the single provider of a required service.

    Criteria in order: best target grade; a local module over library modules;
    the candidate met first (candidates are ordered closest first).
    """
    if len(candidates) <= 1:
        return candidates[0] if candidates else None
    grades = [candidate.grade_target_match(consumer.target) for candidate in candidates]
    best_grade = max(grades)
    if grades.count(best_grade) < len(grades):
        return candidates[grades.index(best_grade)]
    local = [candidate for candidate in candidates if candidate.is_local]
    if local:
        return local[0]
    return candidates[0]


def collect_executable_providers(
    resolver: DependencyResolver,
    executable: ProjectModule,
) -> list[Providers]:
    """Select the providers of every service an executable needs."""
    if not executable.is_executable():
        return []

    walking: list[ProjectModule] = []

    def walk(modules: Iterable[ProjectModule]) -> None:
        for module in modules:
            if module not in walking:
                walking.append(module)

    walk([executable])
    walk(resolver.transitive_project_modules_without_implicit(executable))
    walk(resolver.auto_injected_modules(executable))

    required_scope = resolver.search_scope(executable).to_list()
    optional_scope = [
        *resolver.transitive_project_modules_without_implicit(executable),
        *resolver.auto_injected_modules(executable),
    ]

    required: dict[str, ProjectModule | None] = {}
    optional: dict[str, list[ProjectModule]] = {}
    walked = 0
    while walked < len(walking):
        for module in walking[walked:]:
            for spi in module.required_services:
                required.setdefault(spi, None)
            for spi in module.optional_services:
                optional.setdefault(spi, [])
        walked = len(walking)

        for spi, provider in list(required.items()):
            if provider is not None:
                continue
            candidates = find_modules_providing([*walking, *required_scope], spi, executable)
            best = pick_best_provider(candidates, executable)
            if best is None:
                continue
            required[spi] = best
            walk([best])
            walk(resolver.transitive_project_modules_without_implicit(best))

        for spi, providers in optional.items():
            for provider in find_modules_providing([*optional_scope, *walking], spi, executable):
                if provider not in providers:
                    providers.append(provider)
            walk(providers)

    for spi, provider in sorted(required.items()):
        if provider is None:
            msg = f"[{executable.name}] No provider found for {spi}"
            if executable.is_local:
                logger.warning(msg)
            else:
                logger.debug(msg)

    selected = [
        Providers(spi, (provider.name,), required=True)
        for spi, provider in required.items()
        if provider is not None
    ]
    selected.extend(
        Providers(spi, tuple(p.name for p in providers), required=False)
        for spi, providers in optional.items()
        if spi not in required and providers
    )
    return sorted(selected, key=lambda providers: providers.spi)


__all__ = [
    "Providers",
    "collect_executable_providers",
    "find_modules_providing",
    "pick_best_provider",
]
