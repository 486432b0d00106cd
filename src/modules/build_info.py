"""The context a module is being resolved in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from modules.target import Platform, TargetTag

if TYPE_CHECKING:
    from modules.models import ProjectModule


@dataclass(frozen=True)
class BuildInfo:
    """How a module is currently being resolved.

    The same module resolves differently depending on who asks, so this value
    is passed to resolution functions and never stored on the module.
    """

    for_web: bool = False
    executable: bool = False
    for_catalog: bool = False
    for_desktop: bool = False

    @classmethod
    def plain(cls) -> BuildInfo:
        """A plain library build: no web, desktop, executable or catalog."""
        return cls()

    @classmethod
    def for_module(cls, module: ProjectModule) -> BuildInfo:
        """The context a module is built in, derived from its name and flags."""
        target = module.target
        platforms = target.supported_platforms
        on_jre = target.is_mono_platform(Platform.JRE)
        name = module.name
        return cls(
            for_web=bool(platforms) and Platform.JRE not in platforms,
            executable=module.is_executable(),
            for_catalog="-registry-" in name or name.endswith("-registry"),
            for_desktop=on_jre
            and (target.has_tag(TargetTag.OPENJFX) or target.has_tag(TargetTag.GLUON)),
        )

    @property
    def is_plain(self) -> bool:
        return not (self.for_web or self.executable or self.for_catalog or self.for_desktop)


__all__ = ["BuildInfo"]
