from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from contract.reports import (
    ARTIFACTS_JSONL,
    CYCLES_JSON,
    DEPENDENCIES_JSONL,
    MODULES_JSONL,
)
from modules.models import ProjectModule
from registry import open_root
from reports.generators import (
    ArtifactsGenerator,
    CyclesGenerator,
    DependenciesGenerator,
    ModulesGenerator,
)
from reports.models import CyclesSummary
from resolve.dependencies import DependencyResolver
from settings.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from settings.config import FxBuildConfig

logger = logging.getLogger(__name__)


def generate_all_reports(
    *,
    root: Path | ProjectModule,
    out_dir: Path | None = None,
    config: FxBuildConfig | None = None,
) -> dict[str, object]:
    """Generate the deterministic reports of a module tree.

    Args:
        root: Root module directory, or an already opened root module
        out_dir: Optional output directory for generated reports
        config: Optional configuration (ignored when ``root`` is a module,
            whose registry already carries one)

    Returns:
        Dictionary with counts and list of generated report paths.
    """
    if isinstance(root, ProjectModule):
        module = root
        config = module.registry.config
    else:
        if config is None:
            config = load_config(root)
        module = open_root(root, config)

    if out_dir is None:
        home = module.home if module.home is not None else Path()
        out_dir = resolve_output_dir(home, config.output_dir)

    resolver = DependencyResolver(module.registry)

    generators = (
        ModulesGenerator(),
        DependenciesGenerator(),
        ArtifactsGenerator(),
        CyclesGenerator(),
    )
    results: dict[str, dict[str, object]] = {}
    for generator in generators:
        logger.debug("Running %s generator for %s", generator.name, module.name)
        _, summary = generator.generate(root=module, out_dir=out_dir, resolver=resolver)
        results[generator.name] = summary

    cycles = CyclesSummary(**results["cycles"])

    reports_list = [MODULES_JSONL, DEPENDENCIES_JSONL, ARTIFACTS_JSONL, CYCLES_JSON]

    return {
        "module_count": results["modules"]["module_count"],
        "direct_edge_count": results["dependencies"]["direct_edge_count"],
        "transitive_edge_count": results["dependencies"]["transitive_edge_count"],
        "artifact_count": results["artifacts"]["artifact_count"],
        "node_count": cycles.node_count,
        "edge_count": cycles.edge_count,
        "loop_count": len(cycles.loops),
        "reports": [str(out_dir / name) for name in reports_list],
    }
