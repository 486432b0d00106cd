"""Dependency edges between modules."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.target import Target


class DependencyType(str, Enum):
    """Why an edge exists."""

    SOURCE = "source"
    PLUGIN = "plugin"
    RESOURCE = "resource"
    APPLICATION = "application"
    EMULATION = "emulation"
    IMPLICIT_PROVIDER = "implicit_provider"


@dataclass(frozen=True)
class ModuleDependency:
    """A directed edge, stored by module name.

    Several edges may link the same pair of modules with different types or
    attributes; they are only merged where a consumer groups them by
    destination.
    """

    source: str
    destination: str
    type: DependencyType = DependencyType.SOURCE
    optional: bool = False
    transitive: bool = False
    scope: str | None = None
    classifier: str | None = None
    executable_target: Target | None = None

    @classmethod
    def implicit_provider(cls, source: str, destination: str) -> ModuleDependency:
        return cls(source, destination, DependencyType.IMPLICIT_PROVIDER)

    @classmethod
    def application(cls, source: str, destination: str) -> ModuleDependency:
        return cls(source, destination, DependencyType.APPLICATION)

    def with_source(self, source: str) -> ModuleDependency:
        """The same edge re-attached to another consumer."""
        return replace(self, source=source)

    def __str__(self) -> str:
        return f"{self.source} -[{self.type.value}]-> {self.destination}"


__all__ = ["DependencyType", "ModuleDependency"]
