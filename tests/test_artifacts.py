from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

from contract.coordinates import ArtifactCoordinates
from modules.build_info import BuildInfo
from modules.dependency import DependencyType, ModuleDependency
from modules.models import LibraryModule
from registry import open_root
from resolve.artifacts import ArtifactResolver
from resolve.dependencies import DependencyResolver

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import RootModule

GRAPHICS_EMUL = "webfx-kit-javafxgraphics-emul"
JAVABASE_EMUL = "webfx-platform-gwt-emul-javabase"

WEB_EXECUTABLE = BuildInfo(for_web=True, executable=True)
CATALOG = BuildInfo(for_catalog=True)


def _open(tmp_path: Path, modules: dict[str, dict[str, Any]]) -> RootModule:
    root_home = tmp_path / "app"
    root_home.mkdir()
    (root_home / "module.json").write_bytes(orjson.dumps({"children": list(modules)}))
    for name, descriptor in modules.items():
        (root_home / name).mkdir()
        (root_home / name / "module.json").write_bytes(orjson.dumps(descriptor))
    return open_root(root_home)


def _emulation_tree(tmp_path: Path) -> tuple[ArtifactResolver, RootModule]:
    root = _open(
        tmp_path,
        {
            GRAPHICS_EMUL: {},
            JAVABASE_EMUL: {},
            "app-core": {
                "dependencies": [{"name": GRAPHICS_EMUL}, {"name": "javafx-graphics"}]
            },
            "app-gwt": {"executable": True, "dependencies": [{"name": GRAPHICS_EMUL}]},
        },
    )
    return ArtifactResolver(DependencyResolver(root.registry)), root


def test_emulation_module_in_plain_library_build(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    core = root.registry.get_project_module("app-core")

    assert core.build_info.is_plain
    assert artifacts.module_artifacts(core) == [
        ArtifactCoordinates(
            "org.openjfx", "javafx-graphics", "${openjfx.version}", scope="provided"
        )
    ]


def test_emulation_module_in_web_executable_build(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    executable = root.registry.get_project_module("app-gwt")

    declared = artifacts.module_artifacts(executable)

    assert [c.artifact_id for c in declared] == [GRAPHICS_EMUL, JAVABASE_EMUL, "app"]
    graphics, javabase, application = declared
    assert graphics == ArtifactCoordinates(
        "${webfx.groupId}", GRAPHICS_EMUL, "${webfx.version}", classifier="sources"
    )
    assert javabase.classifier == "shaded-sources"
    assert application.classifier == "sources"


def test_catalog_view_redirects_native_graphics(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    graphics = root.registry.get("javafx-graphics")

    assert artifacts.artifact_id(graphics, CATALOG) == GRAPHICS_EMUL
    assert artifacts.artifact_id(graphics, BuildInfo.plain()) == "javafx-graphics"
    assert artifacts.artifact_id(graphics, WEB_EXECUTABLE) is None


def test_context_flips_emulation_coordinates(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    emulation = root.registry.get(GRAPHICS_EMUL)

    plain = artifacts.module_coordinates(emulation, BuildInfo.plain())
    web = artifacts.module_coordinates(emulation, BuildInfo(for_web=True))

    assert plain is not None
    assert web is not None
    assert (plain.group_id, plain.artifact_id) == ("org.openjfx", "javafx-graphics")
    assert (web.group_id, web.artifact_id) == ("${webfx.groupId}", GRAPHICS_EMUL)
    assert artifacts.module_coordinates(emulation, BuildInfo.plain()) == plain


def test_platform_modules_need_no_artifact(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    java_base = root.registry.get("java-base")
    nio = LibraryModule("java-nio-emul", platform=True)

    assert artifacts.artifact_id(java_base, WEB_EXECUTABLE) is None
    assert artifacts.artifact_id(nio, BuildInfo.plain()) is None
    assert artifacts.artifact_id(nio, WEB_EXECUTABLE) == "gwt-nio"
    assert artifacts.group_id(nio, "gwt-nio") == "com.google.gwt"


def test_web_executable_drops_and_substitutes(tmp_path: Path) -> None:
    artifacts, _ = _emulation_tree(tmp_path)

    assert artifacts.artifact_id(LibraryModule("elemental2-dom"), WEB_EXECUTABLE) is None
    assert artifacts.artifact_id(LibraryModule("gwt-user"), WEB_EXECUTABLE) == "gwt-dev"
    assert artifacts.artifact_id(LibraryModule("gwt-user"), BuildInfo.plain()) == "gwt-user"


def test_declared_artifact_id_wins_over_name(tmp_path: Path) -> None:
    root = _open(tmp_path, {"app-core": {"artifact_id": "demo-core"}})
    artifacts = ArtifactResolver(DependencyResolver(root.registry))
    core = root.registry.get("app-core")

    assert artifacts.artifact_id(core, BuildInfo.plain()) == "demo-core"


def test_scope_rules(tmp_path: Path) -> None:
    artifacts, _ = _emulation_tree(tmp_path)
    slf4j = LibraryModule("slf4j-api")
    edge = ModuleDependency("app-core", "slf4j-api")

    assert artifacts.scope(slf4j, [edge], BuildInfo.plain()) == "runtime"
    assert artifacts.scope(slf4j, [edge], WEB_EXECUTABLE) is None
    assert (
        artifacts.scope(
            slf4j, [ModuleDependency("app-core", "slf4j-api", scope="test"), edge],
            BuildInfo.plain(),
        )
        == "test"
    )
    optional = ModuleDependency("app-core", "slf4j-api", optional=True)
    assert artifacts.scope(slf4j, [optional], WEB_EXECUTABLE) == "provided"


def test_explicit_classifier_wins(tmp_path: Path) -> None:
    artifacts, _ = _emulation_tree(tmp_path)
    module = LibraryModule("some-lib")
    edge = ModuleDependency("app-gwt", "some-lib", classifier="natives")

    assert artifacts.classifier(module, [edge], BuildInfo.plain()) == "natives"
    assert artifacts.classifier(module, [edge], WEB_EXECUTABLE) == "natives"
    assert artifacts.classifier(module, [], WEB_EXECUTABLE) == "sources"
    assert artifacts.classifier(LibraryModule("gwt-time"), [], WEB_EXECUTABLE) is None


def test_interface_substituted_by_implementation_at_lookup(tmp_path: Path) -> None:
    root = _open(
        tmp_path,
        {
            "app-ui": {"interface": True},
            "app-ui-web": {"implements": ["app-ui"]},
            "app-view": {"dependencies": [{"name": "app-ui"}]},
            "app-gwt": {"executable": True, "dependencies": [{"name": "app-ui"}]},
        },
    )
    registry = root.registry
    artifacts = ArtifactResolver(DependencyResolver(registry))

    executable = artifacts.module_artifacts(registry.get_project_module("app-gwt"))
    library = artifacts.module_artifacts(registry.get_project_module("app-view"))

    assert [c.artifact_id for c in executable].count("app-ui-web") == 1
    assert "app-ui" not in [c.artifact_id for c in executable]
    assert library == [ArtifactCoordinates(None, "app-ui", None, scope="provided")]


def test_grouping_merges_edges_and_sorts_emulation_first(tmp_path: Path) -> None:
    artifacts, root = _emulation_tree(tmp_path)
    consumer = root.registry.get_project_module("app-gwt")
    edges = [
        ModuleDependency("app-gwt", "app-core"),
        ModuleDependency("app-gwt", JAVABASE_EMUL, DependencyType.EMULATION),
        ModuleDependency("app-gwt", "app-core", DependencyType.PLUGIN, scope="compile"),
        ModuleDependency("app-gwt", "app-gwt"),
        ModuleDependency("app-gwt", "javafx-base"),
    ]

    resolved = artifacts.resolve(consumer, edges, WEB_EXECUTABLE)

    assert [c.artifact_id for c in resolved] == [JAVABASE_EMUL, "app-core"]
    assert resolved[1].scope is None
    assert artifacts.resolve(consumer, edges, WEB_EXECUTABLE) == resolved


def test_aggregate_module_is_a_pom(tmp_path: Path) -> None:
    root = _open(tmp_path, {"app-parent": {"aggregate": True}})
    artifacts = ArtifactResolver(DependencyResolver(root.registry))

    coordinates = artifacts.module_coordinates(root.registry.get("app-parent"))

    assert coordinates is not None
    assert coordinates.type == "pom"
