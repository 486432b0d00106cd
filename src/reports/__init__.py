"""Report generation entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import ProjectModule
    from settings.config import FxBuildConfig


def generate_all_reports(
    *,
    root: Path | ProjectModule,
    out_dir: Path | None = None,
    config: FxBuildConfig | None = None,
) -> dict[str, object]:
    """Generate reports via lazy import to avoid package import cycles."""
    from reports.write import generate_all_reports as _generate_all_reports

    return _generate_all_reports(root=root, out_dir=out_dir, config=config)


__all__ = ["generate_all_reports"]
