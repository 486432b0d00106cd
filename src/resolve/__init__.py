"""Dependency, service provider and artifact resolution."""

from resolve.artifacts import ArtifactResolver
from resolve.dependencies import DependencyResolver, destinations
from resolve.providers import Providers, collect_executable_providers

__all__ = [
    "ArtifactResolver",
    "DependencyResolver",
    "Providers",
    "collect_executable_providers",
    "destinations",
]
