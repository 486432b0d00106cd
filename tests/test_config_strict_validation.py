from __future__ import annotations

from pathlib import Path

import pytest

from settings.config import ConfigError, load_config, resolve_output_dir


def _write_config(root: Path, toml_content: str) -> None:
    (root / "fxbuild.toml").write_text(toml_content, encoding="utf-8")


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.output_dir == ".fxbuild"
    assert config.descriptor_filename == "module.json"
    assert config.repository.offline is False


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unknown_repository_key_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[repository]
offline = true
mirror = "https://example.invalid"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_positive_timeout_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[repository]
timeout = 0
""".strip(),
    )

    with pytest.raises(ConfigError, match="timeout"):
        load_config(tmp_path)


def test_descriptor_filename_must_be_plain(tmp_path: Path) -> None:
    _write_config(tmp_path, 'descriptor_filename = "meta/module.json"')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "exclude = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
exclude = ["*-sandbox"]
provider_search_prefixes = ["acme-platform"]

[default_group_ids]
"acme-" = "com.acme"

[repository]
offline = true
timeout = 5
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.exclude == ["*-sandbox"]
    assert config.provider_search_prefixes == ["acme-platform"]
    assert config.default_group_id("acme-core") == "com.acme"
    assert config.default_group_id("webfx-kit") is None
    assert config.repository.offline is True
    assert config.repository.timeout == 5


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.output_dir == ".fxbuild"
    assert config.exclude == []
    assert config.default_group_id("webfx-kit") == "${webfx.groupId}"
    assert config.default_version("gwt-dev") is None


def test_output_dir_stays_within_root(tmp_path: Path) -> None:
    assert resolve_output_dir(tmp_path, "reports") == (tmp_path / "reports").resolve()

    for output_dir in ("", "../elsewhere", "~/reports", str(tmp_path / "abs")):
        with pytest.raises(ConfigError):
            resolve_output_dir(tmp_path, output_dir)
