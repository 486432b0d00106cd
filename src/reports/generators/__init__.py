"""Report generators for fxbuild-core."""

from reports.generators.artifacts import ArtifactsGenerator
from reports.generators.cycles import CyclesGenerator
from reports.generators.dependencies import DependenciesGenerator
from reports.generators.modules import ModulesGenerator

__all__ = [
    "ArtifactsGenerator",
    "CyclesGenerator",
    "DependenciesGenerator",
    "ModulesGenerator",
]
