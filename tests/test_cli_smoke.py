from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

from cli import main

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _write_app(tmp_path: Path, modules: dict[str, dict[str, Any]] | None = None) -> Path:
    if modules is None:
        modules = {
            "app-core": {},
            "app-gwt": {"executable": True, "dependencies": [{"name": "app-core"}]},
        }
    root = tmp_path / "app"
    root.mkdir()
    (root / "module.json").write_bytes(
        orjson.dumps({"group_id": "org.demo", "version": "1.0", "children": list(modules)})
    )
    for name, descriptor in modules.items():
        (root / name).mkdir()
        (root / name / "module.json").write_bytes(orjson.dumps(descriptor))
    return root


def test_cli_generate_smoke(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)
    out_dir = tmp_path / "reports"

    exit_code = main(["generate", str(root), "--out-dir", str(out_dir)])

    assert exit_code == 0
    assert sorted(path.name for path in out_dir.iterdir()) == [
        "artifacts.jsonl",
        "cycles.json",
        "dependencies.jsonl",
        "modules.jsonl",
    ]
    assert str(out_dir / "modules.jsonl") in capsys.readouterr().out


def test_cli_generate_default_output_dir(tmp_path: Path) -> None:
    root = _write_app(tmp_path)

    assert not (root / ".fxbuild").exists()
    exit_code = main(["generate", str(root)])

    assert exit_code == 0
    assert any((root / ".fxbuild").iterdir())


def test_cli_deps(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)

    exit_code = main(["deps", str(root), "--module", "app-gwt"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "app-gwt -[source]-> app-core",
        "app-gwt -[application]-> app",
    ]


def test_cli_artifacts(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)

    exit_code = main(["artifacts", str(root), "--module", "app-gwt"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "org.demo:app:1.0:sources",
        "org.demo:app-core:1.0:sources",
    ]


def test_cli_cycles(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(
        tmp_path,
        {
            "app-a": {"dependencies": [{"name": "app-b"}]},
            "app-b": {"dependencies": [{"name": "app-a"}]},
        },
    )

    exit_code = main(["cycles", str(root), "--path", "app-a", "app-b"])

    assert exit_code == 1
    assert capsys.readouterr().out.splitlines() == [
        "app-a -> app-b -> app-a",
        "path: app-a -> app-b",
    ]


def test_cli_cycles_none_found(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)

    assert main(["cycles", str(root)]) == 0
    assert capsys.readouterr().out == ""


def test_cli_executable(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)

    assert main(["executable", str(root), "--platform", "gwt"]) == 0
    assert capsys.readouterr().out == "app-gwt\n"

    assert main(["executable", str(root), "--platform", "jre"]) == 1
    assert "no executable module for jre" in capsys.readouterr().err


def test_cli_rename(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)

    exit_code = main(["rename", "app-core", "app-base", str(root)])

    assert exit_code == 0
    assert capsys.readouterr().out == "app-core -> app-base\n"
    assert not (root / "app-core").exists()
    assert (root / "app-base" / "module.json").is_file()
    dependent = orjson.loads((root / "app-gwt" / "module.json").read_bytes())
    assert dependent["dependencies"] == [{"name": "app-base"}]


def test_cli_unresolved_module(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path, {"app-core": {"dependencies": [{"name": "missing-lib"}]}})

    exit_code = main(["deps", str(root), "--module", "app-core"])

    assert exit_code == 1
    assert "Unresolved module 'missing-lib'" in capsys.readouterr().err


def test_cli_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _write_app(tmp_path)
    (root / "fxbuild.toml").write_text("bogus_key = true\n", encoding="utf-8")

    exit_code = main(["generate", str(root)])

    assert exit_code == 2
    assert capsys.readouterr().err.startswith("config error:")


def test_cli_rename_to_existing_module(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _write_app(tmp_path)

    exit_code = main(["rename", "app-core", "app-gwt", str(root)])

    assert exit_code == 1
    assert "module app-gwt already exists" in capsys.readouterr().err
    assert (root / "app-core" / "module.json").is_file()


def test_cli_rename_onto_existing_directory(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _write_app(tmp_path)
    (root / "app-extra").mkdir()

    exit_code = main(["rename", "app-core", "app-extra", str(root)])

    assert exit_code == 1
    assert "already exists" in capsys.readouterr().err
    assert (root / "app-core" / "module.json").is_file()


def test_cli_download_failure_reported(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = tmp_path / "app"
    (root / "app-core").mkdir(parents=True)
    (root / "module.json").write_bytes(
        orjson.dumps(
            {
                "children": ["app-core"],
                "libraries": [
                    {"name": "webfx-lib", "group_id": "dev.webfx", "version": "0.1"}
                ],
            }
        )
    )
    (root / "app-core" / "module.json").write_bytes(
        orjson.dumps({"dependencies": [{"name": "webfx-lib"}]})
    )
    (root / "fxbuild.toml").write_text(
        f'[repository]\nlocal = "{(tmp_path / "m2").as_posix()}"\noffline = true\n',
        encoding="utf-8",
    )

    exit_code = main(["deps", str(root), "--module", "app-core", "--view", "transitive"])

    assert exit_code == 1
    assert "offline" in capsys.readouterr().err
