from __future__ import annotations

from pathlib import Path

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "fxbuild.toml"

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RepositoryConfig(_StrictModel):
    """Where published artifacts are looked up and downloaded from."""

    local: str = Field(
        default="~/.m2/repository",
        description="Local repository directory (Maven layout)",
    )
    remote_url: str = Field(
        default=MAVEN_CENTRAL_URL,
        description="Remote repository base URL",
    )
    timeout: float = Field(
        default=30.0,
        description="Download timeout in seconds",
    )
    offline: bool = Field(
        default=False,
        description="Never download; only use local copies",
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            msg = "repository.timeout must be positive"
            raise ValueError(msg)
        return v

    def local_path(self) -> Path:
        return Path(self.local).expanduser()


class FxBuildConfig(_StrictModel):
    """Configuration for a module workspace."""

    output_dir: str = Field(
        default=".fxbuild",
        description="Output directory for generated reports",
    )
    descriptor_filename: str = Field(
        default="module.json",
        description="Descriptor file name inside each module directory",
    )
    usage_filename: str = Field(
        default="usage.json",
        description="Static usage file name inside each module directory",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns of directories skipped by child discovery",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    provider_search_prefixes: list[str] = Field(
        default_factory=lambda: [
            "webfx-platform",
            "webfx-kit",
            "webfx-stack",
            "webfx-extras",
            "webfx-framework",
        ],
        description="Name prefixes of registered trees searched for "
        "auto-injected modules and service providers",
    )
    default_group_ids: dict[str, str] = Field(
        default_factory=lambda: {
            "gwt-": "com.google.gwt",
            "webfx-": "${webfx.groupId}",
        },
        description="Module name prefix -> groupId used when none is declared",
    )
    default_versions: dict[str, str] = Field(
        default_factory=lambda: {"webfx-": "${webfx.version}"},
        description="Module name prefix -> version used when none is declared",
    )
    repository: RepositoryConfig = Field(
        default_factory=RepositoryConfig,
        description="Binary repository settings",
    )

    @field_validator("descriptor_filename", "usage_filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            msg = f"'{v}' must be a plain file name"
            raise ValueError(msg)
        return v

    def default_group_id(self, name: str) -> str | None:
        return _lookup_prefix(self.default_group_ids, name)

    def default_version(self, name: str) -> str | None:
        return _lookup_prefix(self.default_versions, name)


def _lookup_prefix(table: dict[str, str], name: str) -> str | None:
    # Longest prefix wins.
    for prefix in sorted(table, key=len, reverse=True):
        if name.startswith(prefix):
            return table[prefix]
    return None


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the workspace root.

    The config output_dir must be a non-empty relative path that remains
    within the workspace root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the workspace root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the workspace root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the workspace root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> FxBuildConfig:
    """Load configuration from fxbuild.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return FxBuildConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return FxBuildConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "MAVEN_CENTRAL_URL",
    "ConfigError",
    "FxBuildConfig",
    "RepositoryConfig",
    "load_config",
    "resolve_output_dir",
]
