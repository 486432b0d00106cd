"""Command-line interface for fxbuild-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, cast

import requests

from graph.cycles import CycleAnalyzer
from modules.errors import ResolutionError
from modules.models import DevProjectModule
from modules.target import Platform
from registry import open_root
from reports.write import generate_all_reports
from resolve.artifacts import ArtifactResolver
from resolve.dependencies import DependencyResolver
from settings.config import ConfigError, load_config

if TYPE_CHECKING:
    from modules.models import ProjectModule, RootModule

DEPENDENCY_VIEWS = ("direct", "transitive", "visible")


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Root module directory (default: .)",
    )


def _add_module_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--module",
        default=None,
        help="Module to inspect (default: the root module)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fxbuild")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log resolution details to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate reports")
    _add_common_paths(generate_parser)
    generate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for generated reports (default: config output dir)",
    )

    deps_parser = subparsers.add_parser("deps", help="List resolved dependencies")
    _add_common_paths(deps_parser)
    _add_module_option(deps_parser)
    deps_parser.add_argument(
        "--view",
        choices=DEPENDENCY_VIEWS,
        default="direct",
        help="Which dependency set to list (default: direct)",
    )

    artifacts_parser = subparsers.add_parser(
        "artifacts", help="List the artifacts a module declares"
    )
    _add_common_paths(artifacts_parser)
    _add_module_option(artifacts_parser)

    cycles_parser = subparsers.add_parser(
        "cycles", help="Report dependency loops (exit 1 when any is found)"
    )
    _add_common_paths(cycles_parser)
    cycles_parser.add_argument(
        "--path",
        nargs=2,
        metavar=("FROM", "TO"),
        default=None,
        help="Also list every dependency path between two modules",
    )

    executable_parser = subparsers.add_parser(
        "executable", help="Print the executable module built for a platform"
    )
    _add_common_paths(executable_parser)
    executable_parser.add_argument(
        "--platform",
        choices=[platform.value for platform in Platform],
        required=True,
        help="Target platform",
    )

    rename_parser = subparsers.add_parser("rename", help="Rename a local module")
    rename_parser.add_argument("module", help="Current module name")
    rename_parser.add_argument("new_name", help="New module name")
    _add_common_paths(rename_parser)

    return parser


def _open(root: Path) -> RootModule:
    return open_root(root, load_config(root))


def _select_module(root_module: RootModule, name: str | None) -> ProjectModule:
    if name is None:
        return root_module
    return root_module.registry.get_project_module(name)


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _handle_generate(root: Path, out_dir: str | None) -> int:
    summary = generate_all_reports(root=root, out_dir=_resolve_output_dir(out_dir))
    for report in cast("list[str]", summary["reports"]):
        sys.stdout.write(f"{report}\n")
    return 0


def _handle_deps(root: Path, module_name: str | None, view: str) -> int:
    module = _select_module(_open(root), module_name)
    resolver = DependencyResolver(module.registry)
    if view == "transitive":
        dependencies = resolver.transitive_dependencies(module)
    elif view == "visible":
        dependencies = resolver.visible_dependencies(module)
    else:
        dependencies = resolver.direct_dependencies(module)
    for dependency in dependencies:
        sys.stdout.write(f"{dependency}\n")
    return 0


def _handle_artifacts(root: Path, module_name: str | None) -> int:
    module = _select_module(_open(root), module_name)
    artifact_resolver = ArtifactResolver(DependencyResolver(module.registry))
    for coordinates in artifact_resolver.module_artifacts(module):
        sys.stdout.write(f"{coordinates}\n")
    return 0


def _handle_cycles(root: Path, path: list[str] | None) -> int:
    root_module = _open(root)
    analyzer = CycleAnalyzer(DependencyResolver(root_module.registry))
    loops = analyzer.loops(root_module)
    for loop in loops:
        sys.stdout.write(f"{loop}\n")
    if path is not None:
        source, destination = path
        for modules in analyzer.dependency_paths(root_module, source, destination):
            sys.stdout.write(f"path: {' -> '.join(modules)}\n")
    return 1 if loops else 0


def _handle_executable(root: Path, platform: str) -> int:
    root_module = _open(root)
    executable = root_module.registry.select_executable(root_module, Platform(platform))
    sys.stdout.write(f"{executable.name}\n")
    return 0


def _handle_rename(root: Path, module_name: str, new_name: str) -> int:
    root_module = _open(root)
    module = root_module.registry.get_project_module(module_name)
    if not isinstance(module, DevProjectModule):
        sys.stderr.write(f"error: {module_name} is not a local module\n")
        return 1
    try:
        renamed = root_module.registry.rename(module, new_name)
    except (ValueError, FileExistsError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    sys.stdout.write(f"{module_name} -> {renamed.name}\n")
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    root = Path(args.root).expanduser().resolve()

    if args.command == "generate":
        return _handle_generate(root, args.out_dir)

    if args.command == "deps":
        return _handle_deps(root, args.module, args.view)

    if args.command == "artifacts":
        return _handle_artifacts(root, args.module)

    if args.command == "cycles":
        return _handle_cycles(root, args.path)

    if args.command == "executable":
        return _handle_executable(root, args.platform)

    if args.command == "rename":
        return _handle_rename(root, args.module, args.new_name)

    raise AssertionError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return _dispatch(args)
    except ConfigError as exc:
        sys.stderr.write(f"config error: {exc}\n")
        return 2
    except ResolutionError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    except requests.RequestException as exc:
        sys.stderr.write(f"download error: {exc}\n")
        return 1
    except OSError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
