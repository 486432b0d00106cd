"""Child module directory discovery."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _should_include_directory(
    path: Path,
    directory: Path,
    descriptor_filename: str,
    output_dir: str,
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a subdirectory is a module directory passing every filter."""
    if not path.is_dir() or path.is_symlink():
        return False

    if path.name.startswith("."):
        return False

    if not _is_within_root(path, directory):
        return False

    if output_dir and path.name == output_dir:
        return False

    if not (path / descriptor_filename).is_file():
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    rel_path_str = path.relative_to(directory).as_posix()
    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) or fnmatch(path.name, pat)
        for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {path for path in gitignore_paths if path.is_file()}
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def find_module_directories(
    directory: Path,
    *,
    descriptor_filename: str = "module.json",
    output_dir: str = ".fxbuild",
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> list[Path]:
    """Find the child module directories of a module directory.

    A child is an immediate subdirectory holding a descriptor file. Ignored
    (``.gitignore``), excluded, hidden and symlinked directories are skipped.

    Args:
        directory: The parent module's home directory
        descriptor_filename: Descriptor file marking a module directory
        output_dir: Directory name to skip (default ".fxbuild")
        exclude_patterns: Optional list of fnmatch patterns; directories
            matching any pattern are excluded
        nested_gitignore: Compose every .gitignore below ``directory``

    Returns:
        Child directories sorted by name for deterministic ordering.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    matched = [
        path
        for path in directory.iterdir()
        if _should_include_directory(
            path,
            directory,
            descriptor_filename,
            output_dir,
            gitignore_matches,
            exclude_patterns,
        )
    ]

    matched.sort(key=lambda p: p.name)
    return matched


__all__ = ["find_module_directories"]
