"""Static usage read from files written by the source analyzer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from contract.usage import EMPTY_USAGE, StaticUsage
from modules.errors import MalformedDescriptorError

if TYPE_CHECKING:
    from pathlib import Path


class FileUsageAnalyzer:
    """Loads ``<home>/<usage_filename>``; modules without one use nothing."""

    def __init__(self, usage_filename: str = "usage.json") -> None:
        self.usage_filename = usage_filename

    def usage(self, name: str, home: Path | None) -> StaticUsage:
        if home is None:
            return EMPTY_USAGE
        path = home / self.usage_filename
        if not path.is_file():
            return EMPTY_USAGE
        try:
            return StaticUsage.model_validate(orjson.loads(path.read_bytes()))
        except (orjson.JSONDecodeError, ValidationError) as exc:
            raise MalformedDescriptorError(name, f"valid usage ({exc})", path) from exc


class StaticUsageTable:
    """Usage supplied up front, keyed by module name."""

    def __init__(self, usages: dict[str, StaticUsage] | None = None) -> None:
        self.usages = dict(usages or {})

    def usage(self, name: str, home: Path | None) -> StaticUsage:
        return self.usages.get(name, EMPTY_USAGE)


__all__ = ["FileUsageAnalyzer", "StaticUsageTable"]
