"""Resolution failures surfaced to callers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class ResolutionError(Exception):
    """Base class for failures of a single module resolution."""


class UnresolvedModuleError(ResolutionError):
    """Raised when a module name cannot be found through any registry tier."""

    def __init__(self, name: str, detail: str | None = None) -> None:
        self.name = name
        msg = f"Unresolved module '{name}'"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)

    @classmethod
    def for_package(
        cls, package: str, consumer: str, reasons: list[str]
    ) -> UnresolvedModuleError:
        """No suitable registered module declares ``package``."""
        detail = f"no suitable module declares this package (used by {consumer})"
        return cls(package, "\n".join([detail, *reasons]))


class AmbiguousResolutionError(ResolutionError):
    """Raised when several candidates satisfy a query expecting exactly one."""

    def __init__(self, query: str, candidates: Iterable[str]) -> None:
        self.query = query
        self.candidates = tuple(sorted(candidates))
        msg = f"Ambiguous {query}: {', '.join(self.candidates)}"
        super().__init__(msg)


class MalformedDescriptorError(ResolutionError):
    """Raised when a descriptor lacks a field at the point it is needed."""

    def __init__(self, module: str, field: str, path: Path | None = None) -> None:
        self.module = module
        self.field = field
        self.path = path
        location = f" ({path})" if path is not None else ""
        msg = f"Malformed descriptor for module '{module}'{location}: missing {field}"
        super().__init__(msg)


__all__ = [
    "AmbiguousResolutionError",
    "MalformedDescriptorError",
    "ResolutionError",
    "UnresolvedModuleError",
]
