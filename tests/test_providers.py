from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import orjson
import pytest

from modules.dependency import ModuleDependency
from modules.errors import MalformedDescriptorError
from registry import open_root
from resolve.dependencies import DependencyResolver
from resolve.providers import Providers, pick_best_provider

if TYPE_CHECKING:
    from pathlib import Path

    from modules.models import ProjectModule


def _open(
    tmp_path: Path,
    modules: dict[str, dict[str, Any]],
    usages: dict[str, dict[str, Any]] | None = None,
) -> tuple[DependencyResolver, dict[str, ProjectModule]]:
    root_home = tmp_path / "app"
    root_home.mkdir()
    (root_home / "module.json").write_bytes(orjson.dumps({"children": list(modules)}))
    for name, descriptor in modules.items():
        home = root_home / name
        home.mkdir()
        (home / "module.json").write_bytes(orjson.dumps(descriptor))
        if usages and name in usages:
            (home / "usage.json").write_bytes(orjson.dumps(usages[name]))
    root = open_root(root_home)
    found = {m.name: m for m in root.this_and_children_in_depth}
    return DependencyResolver(root.registry), found


def _provides(spi: str | None, implementation: str) -> dict[str, Any]:
    return {"provides": [{"spi": spi, "implementation": implementation}]}


def test_required_service_resolves_to_best_graded_provider(tmp_path: Path) -> None:
    resolver, modules = _open(
        tmp_path,
        {
            "app-gwt": {"executable": True},
            "app-store": _provides("org.demo.Store", "org.demo.MemoryStore"),
            "app-store-gwt": _provides("org.demo.Store", "org.demo.LocalStorageStore"),
            "app-store-openjfx": _provides("org.demo.Store", "org.demo.FileStore"),
        },
        usages={"app-gwt": {"required_services": ["org.demo.Store"]}},
    )

    providers = resolver.executable_providers(modules["app-gwt"]).to_list()

    assert providers == [Providers("org.demo.Store", ("app-store-gwt",), required=True)]
    assert ModuleDependency.implicit_provider(
        "app-gwt", "app-store-gwt"
    ) in resolver.direct_dependencies(modules["app-gwt"]).to_list()


def test_tied_grades_keep_the_first_candidate(tmp_path: Path) -> None:
    _, modules = _open(
        tmp_path,
        {
            "app-one": _provides("org.demo.Store", "org.demo.One"),
            "app-two": _provides("org.demo.Store", "org.demo.Two"),
            "app-gwt": {"executable": True},
        },
    )

    best = pick_best_provider([modules["app-two"], modules["app-one"]], modules["app-gwt"])

    assert best is modules["app-two"]
    assert pick_best_provider([], modules["app-gwt"]) is None


def test_optional_service_collects_every_provider_in_closure(tmp_path: Path) -> None:
    resolver, modules = _open(
        tmp_path,
        {
            "app-gwt": {
                "executable": True,
                "optional_services": ["org.demo.Plugin"],
                "dependencies": [{"name": "app-a"}, {"name": "app-b"}],
            },
            "app-a": _provides("org.demo.Plugin", "org.demo.A"),
            "app-b": _provides("org.demo.Plugin", "org.demo.B"),
            "app-c": _provides("org.demo.Plugin", "org.demo.C"),
        },
    )

    providers = resolver.executable_providers(modules["app-gwt"]).to_list()

    assert providers == [
        Providers("org.demo.Plugin", ("app-a", "app-b"), required=False)
    ]


def test_providers_are_collected_until_fixed_point(tmp_path: Path) -> None:
    resolver, modules = _open(
        tmp_path,
        {
            "app-gwt": {"executable": True, "required_services": ["org.demo.Store"]},
            "app-store": {
                **_provides("org.demo.Store", "org.demo.SqlStore"),
                "required_services": ["org.demo.Driver"],
            },
            "app-driver": _provides("org.demo.Driver", "org.demo.H2Driver"),
        },
    )

    providers = resolver.executable_providers(modules["app-gwt"]).to_list()

    assert [p.spi for p in providers] == ["org.demo.Driver", "org.demo.Store"]
    assert [p.modules for p in providers] == [("app-driver",), ("app-store",)]


def test_unresolved_required_service_is_logged(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    resolver, modules = _open(
        tmp_path,
        {"app-gwt": {"executable": True, "required_services": ["org.demo.Missing"]}},
    )

    with caplog.at_level(logging.WARNING, logger="resolve.providers"):
        providers = resolver.executable_providers(modules["app-gwt"]).to_list()

    assert providers == []
    assert "[app-gwt] No provider found for org.demo.Missing" in caplog.text


def test_non_executable_selects_no_providers(tmp_path: Path) -> None:
    resolver, modules = _open(
        tmp_path,
        {
            "app-core": {"required_services": ["org.demo.Store"]},
            "app-store": _provides("org.demo.Store", "org.demo.MemoryStore"),
        },
    )

    assert resolver.executable_providers(modules["app-core"]).is_empty()


def test_provider_without_spi_is_malformed_when_needed(tmp_path: Path) -> None:
    resolver, modules = _open(
        tmp_path,
        {
            "app-gwt": {"executable": True, "required_services": ["org.demo.Store"]},
            "app-broken": _provides(None, "org.demo.Orphan"),
        },
    )

    assert modules["app-broken"].descriptor.provides[0].spi is None
    with pytest.raises(MalformedDescriptorError, match="spi of provider org.demo.Orphan"):
        resolver.executable_providers(modules["app-gwt"]).to_list()
