"""File-based collaborators: descriptors, usage and the binary repository."""

from store.descriptors import FileDescriptorStore
from store.repository import MavenRepositoryClient, artifact_relative_path
from store.usage import FileUsageAnalyzer, StaticUsageTable

__all__ = [
    "FileDescriptorStore",
    "FileUsageAnalyzer",
    "MavenRepositoryClient",
    "StaticUsageTable",
    "artifact_relative_path",
]
