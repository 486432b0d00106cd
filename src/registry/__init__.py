"""Module registry and the built-in platform catalog."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from registry.registry import ModuleRegistry, unsuitable_reason
from settings.config import FxBuildConfig

if TYPE_CHECKING:
    from contract.ports import DescriptorSource, RepositoryClient, UsageAnalyzer
    from modules.models import RootModule


def open_root(
    project_dir: Path,
    config: FxBuildConfig | None = None,
    *,
    descriptors: DescriptorSource | None = None,
    usage_analyzer: UsageAnalyzer | None = None,
    repository: RepositoryClient | None = None,
) -> RootModule:
    """Create a registry for ``project_dir`` and return its root module.

    Sibling directories of ``project_dir`` form the workspace searched for
    local copies of declared libraries.
    """
    project_dir = Path(project_dir).resolve()
    registry = ModuleRegistry(
        project_dir.parent,
        config or FxBuildConfig(),
        descriptors=descriptors,
        usage_analyzer=usage_analyzer,
        repository=repository,
    )
    return registry.open_root(project_dir)


__all__ = ["ModuleRegistry", "open_root", "unsuitable_reason"]
