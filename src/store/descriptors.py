"""JSON descriptor files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from contract.descriptors import ModuleDescriptor
from modules.errors import MalformedDescriptorError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class FileDescriptorStore:
    """Reads and writes ``<home>/<descriptor_filename>`` as JSON."""

    def __init__(self, descriptor_filename: str = "module.json") -> None:
        self.descriptor_filename = descriptor_filename

    def path_of(self, home: Path) -> Path:
        return home / self.descriptor_filename

    def exists(self, home: Path) -> bool:
        return self.path_of(home).is_file()

    def read(self, home: Path) -> ModuleDescriptor:
        return self.read_file(self.path_of(home))

    def read_file(self, path: Path) -> ModuleDescriptor:
        data = path.read_bytes()
        try:
            payload = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            raise MalformedDescriptorError(
                path.parent.name, f"valid JSON ({exc})", path
            ) from exc
        if not isinstance(payload, dict):
            raise MalformedDescriptorError(path.parent.name, "a JSON object", path)
        try:
            return ModuleDescriptor.model_validate(payload)
        except ValidationError as exc:
            raise MalformedDescriptorError(
                path.parent.name, f"valid fields ({exc.error_count()} errors)", path
            ) from exc

    def write(self, home: Path, descriptor: ModuleDescriptor) -> None:
        path = self.path_of(home)
        payload = descriptor.model_dump(mode="json", exclude_defaults=True)
        path.write_bytes(
            orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)
            + b"\n"
        )
        logger.debug("Wrote descriptor %s", path)


__all__ = ["FileDescriptorStore"]
