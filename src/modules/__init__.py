"""Module graph entities, targets and resolution errors."""

from modules.build_info import BuildInfo
from modules.dependency import DependencyType, ModuleDependency
from modules.errors import (
    AmbiguousResolutionError,
    MalformedDescriptorError,
    ResolutionError,
    UnresolvedModuleError,
)
from modules.target import Platform, Target, TargetTag

__all__ = [
    "AmbiguousResolutionError",
    "BuildInfo",
    "DependencyType",
    "MalformedDescriptorError",
    "ModuleDependency",
    "Platform",
    "ResolutionError",
    "Target",
    "TargetTag",
    "UnresolvedModuleError",
]
