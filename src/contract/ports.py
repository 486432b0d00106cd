"""Collaborators the resolution core consumes.

The core never parses descriptor files, scans sources or talks to a binary
repository itself; it calls these interfaces. ``store`` ships file-based
implementations, and tests substitute their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from contract.coordinates import ArtifactCoordinates
    from contract.descriptors import ModuleDescriptor
    from contract.usage import StaticUsage


class DescriptorSource(Protocol):
    """Reads and writes the descriptors of local modules."""

    def exists(self, home: Path) -> bool: ...

    def read(self, home: Path) -> ModuleDescriptor: ...

    def write(self, home: Path, descriptor: ModuleDescriptor) -> None: ...

    def read_file(self, path: Path) -> ModuleDescriptor: ...


class UsageAnalyzer(Protocol):
    """Supplies the statically observed usage of a module's sources."""

    def usage(self, name: str, home: Path | None) -> StaticUsage: ...


class RepositoryClient(Protocol):
    """Locates and downloads published artifacts."""

    def local_path(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> Path: ...

    def has_local_copy(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> bool: ...

    def download(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> Path: ...


__all__ = ["DescriptorSource", "RepositoryClient", "UsageAnalyzer"]
