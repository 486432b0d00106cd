from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_module_directories

if TYPE_CHECKING:
    from pathlib import Path


def _module_dir(parent: Path, name: str, descriptor: str = "module.json") -> Path:
    home = parent / name
    home.mkdir(parents=True)
    (home / descriptor).write_text("{}\n", encoding="utf-8")
    return home


def _names(directories: list[Path]) -> list[str]:
    return [path.name for path in directories]


def test_children_need_a_descriptor(tmp_path: Path) -> None:
    _module_dir(tmp_path, "app-core")
    _module_dir(tmp_path, "app-base")
    (tmp_path / "docs").mkdir()
    (tmp_path / "README.md").write_text("app\n", encoding="utf-8")

    assert _names(find_module_directories(tmp_path)) == ["app-base", "app-core"]


def test_hidden_output_and_excluded_directories_skipped(tmp_path: Path) -> None:
    _module_dir(tmp_path, "app-core")
    _module_dir(tmp_path, ".cache")
    _module_dir(tmp_path, "out")
    _module_dir(tmp_path, "app-sandbox")

    found = find_module_directories(
        tmp_path, output_dir="out", exclude_patterns=["*-sandbox"]
    )

    assert _names(found) == ["app-core"]


def test_custom_descriptor_filename(tmp_path: Path) -> None:
    _module_dir(tmp_path, "app-core", descriptor="fx.json")
    _module_dir(tmp_path, "app-base")

    found = find_module_directories(tmp_path, descriptor_filename="fx.json")

    assert _names(found) == ["app-core"]


def test_gitignored_directories_skipped(tmp_path: Path) -> None:
    _module_dir(tmp_path, "app-core")
    _module_dir(tmp_path, "generated")
    (tmp_path / ".gitignore").write_text("generated\n", encoding="utf-8")

    assert _names(find_module_directories(tmp_path)) == ["app-core"]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_symlinked_module_directories_skipped(tmp_path: Path) -> None:
    root = tmp_path / "app"
    root.mkdir()
    _module_dir(root, "app-core")

    external = _module_dir(tmp_path, "external-module")
    (root / "app-linked").symlink_to(external, target_is_directory=True)

    assert _names(find_module_directories(root)) == ["app-core"]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    root = tmp_path / "app"
    root.mkdir()
    _module_dir(root, "app-core")
    (root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external = tmp_path / "external"
    external.mkdir()
    (external / "outside.gitignore").write_text("app-core\n", encoding="utf-8")
    (root / "linked.gitignore").symlink_to(external / "outside.gitignore")

    matcher = _build_gitignore_matcher(root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(root / "app-core")) is False
    assert _names(find_module_directories(root, nested_gitignore=True)) == ["app-core"]
