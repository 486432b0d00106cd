"""Platform tags and target compatibility grading.

Tags live in four partitions (platform, architecture, viewer, web techno).
Within a partition tags form a tree: ``gwt`` refines ``web`` which refines the
platform partition. Some tags also imply tags of other partitions, e.g.
``openjfx`` implies ``desktop`` which implies ``jre``.

A module's target is read from its name: every dash-separated token after the
first one that names a tag contributes that tag (``app-css-web`` targets
``web``). A module without tags is generic and supports every platform.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum


class Platform(str, Enum):
    """Compilation platforms an executable module can be built for."""

    JRE = "jre"
    GWT = "gwt"
    J2CL = "j2cl"
    TEAVM = "teavm"


class TargetTag(Enum):
    """Target tags; partition roots carry names no module token can match."""

    PLATFORM_PARTITION = "platform-partition"
    JAVA = "java"
    JRE = "jre"
    OPENJFX = "openjfx"
    GLUON = "gluon"
    VERTX = "vertx"
    WEB = "web"
    GWT = "gwt"
    J2CL = "j2cl"
    TEAVM = "teavm"
    EMUL = "emul"

    ARCH_PARTITION = "arch-partition"
    SHARED = "shared"
    SERVER = "server"
    CLIENT = "client"
    BACKOFFICE = "backoffice"
    FRONTOFFICE = "frontoffice"

    VIEWER_PARTITION = "viewer-partition"
    DESKTOP = "desktop"
    MOBILE = "mobile"
    BROWSER = "browser"

    WEB_TECHNO_PARTITION = "web-techno-partition"
    HTML = "html"
    SVG = "svg"

    @property
    def parent(self) -> TargetTag | None:
        return _PARENTS.get(self)

    @property
    def partition(self) -> TargetTag:
        return _partition(self)

    @property
    def partition_depth(self) -> int:
        return _partition_depth(self)

    @property
    def is_platform_tag(self) -> bool:
        return self.partition is TargetTag.PLATFORM_PARTITION

    @property
    def implied_tags(self) -> tuple[TargetTag, ...]:
        """Tags implied by this tag (transitively), excluding itself."""
        return _implied_tags(self)

    @property
    def supported_platforms(self) -> tuple[Platform, ...]:
        return _supported_platforms(self)

    def supports(self, platform: Platform) -> bool:
        return platform in self.supported_platforms

    def is_platform_compatible(self, requested: TargetTag) -> bool:
        return any(self.supports(p) for p in requested.supported_platforms)

    def grade_compatibility(self, requested: TargetTag) -> int:
        """Grade how well this tag satisfies ``requested`` (negative = reject)."""
        if not self.is_platform_compatible(requested):
            return -1
        return _grade_partition_compatibility(self, requested)

    @classmethod
    def from_token(cls, token: str) -> TargetTag | None:
        return _BY_TOKEN.get(token)

    @classmethod
    def parse(cls, text: str, *, skip_first_token: bool = False) -> tuple[TargetTag, ...]:
        """Parse the tags named by the dash-separated tokens of ``text``.

        The first token of a module name is the project prefix and is skipped
        (``gluon-demo-application-gwt`` targets gwt, not gluon).
        """
        tokens = text.split("-")
        if skip_first_token:
            tokens = tokens[1:]
        tags = (cls.from_token(token) for token in tokens)
        return tuple(tag for tag in tags if tag is not None)


_PARENTS: dict[TargetTag, TargetTag] = {
    TargetTag.JAVA: TargetTag.PLATFORM_PARTITION,
    TargetTag.JRE: TargetTag.JAVA,
    TargetTag.OPENJFX: TargetTag.JRE,
    TargetTag.GLUON: TargetTag.OPENJFX,
    TargetTag.VERTX: TargetTag.JRE,
    TargetTag.WEB: TargetTag.PLATFORM_PARTITION,
    TargetTag.GWT: TargetTag.WEB,
    TargetTag.J2CL: TargetTag.WEB,
    TargetTag.TEAVM: TargetTag.WEB,
    TargetTag.EMUL: TargetTag.WEB,
    TargetTag.SHARED: TargetTag.ARCH_PARTITION,
    TargetTag.SERVER: TargetTag.SHARED,
    TargetTag.CLIENT: TargetTag.SHARED,
    TargetTag.BACKOFFICE: TargetTag.CLIENT,
    TargetTag.FRONTOFFICE: TargetTag.CLIENT,
    TargetTag.DESKTOP: TargetTag.VIEWER_PARTITION,
    TargetTag.MOBILE: TargetTag.VIEWER_PARTITION,
    TargetTag.BROWSER: TargetTag.VIEWER_PARTITION,
    TargetTag.HTML: TargetTag.WEB_TECHNO_PARTITION,
    TargetTag.SVG: TargetTag.WEB_TECHNO_PARTITION,
}

_DECLARED_PLATFORMS: dict[TargetTag, tuple[Platform, ...]] = {
    TargetTag.JAVA: (Platform.JRE,),
    TargetTag.JRE: (Platform.JRE,),
    TargetTag.WEB: (Platform.GWT, Platform.J2CL, Platform.TEAVM),
    TargetTag.GWT: (Platform.GWT,),
    TargetTag.J2CL: (Platform.J2CL,),
    TargetTag.TEAVM: (Platform.TEAVM,),
}

_DIRECT_IMPLIED: dict[TargetTag, TargetTag] = {
    TargetTag.SERVER: TargetTag.JRE,
    TargetTag.OPENJFX: TargetTag.DESKTOP,
    TargetTag.WEB: TargetTag.BROWSER,
    TargetTag.VIEWER_PARTITION: TargetTag.CLIENT,
    TargetTag.DESKTOP: TargetTag.JRE,
    TargetTag.WEB_TECHNO_PARTITION: TargetTag.WEB,
    TargetTag.VERTX: TargetTag.SERVER,
}

_BY_TOKEN: dict[str, TargetTag] = {
    tag.value: tag for tag in TargetTag if "-" not in tag.value
}


@functools.cache
def _partition(tag: TargetTag) -> TargetTag:
    while tag.parent is not None:
        tag = tag.parent
    return tag


@functools.cache
def _partition_depth(tag: TargetTag) -> int:
    depth = 0
    while tag.parent is not None:
        depth += 1
        tag = tag.parent
    return depth


def _collect_implied(collected: list[TargetTag], tag: TargetTag) -> None:
    implied = _DIRECT_IMPLIED.get(tag)
    if implied is not None and implied not in collected:
        collected.append(implied)
        _collect_implied(collected, implied)
    if tag.parent is not None:
        _collect_implied(collected, tag.parent)


@functools.cache
def _implied_tags(tag: TargetTag) -> tuple[TargetTag, ...]:
    collected: list[TargetTag] = []
    _collect_implied(collected, tag)
    return tuple(t for t in collected if t is not tag)


def _restrict(platforms: list[Platform], tag: TargetTag, *, with_implied: bool) -> None:
    declared = _DECLARED_PLATFORMS.get(tag)
    if declared is not None:
        platforms[:] = [p for p in platforms if p in declared]
    elif tag.parent is not None:
        _restrict(platforms, tag.parent, with_implied=True)
    if with_implied:
        for implied in tag.implied_tags:
            _restrict(platforms, implied, with_implied=False)


@functools.cache
def _supported_platforms(tag: TargetTag) -> tuple[Platform, ...]:
    declared = _DECLARED_PLATFORMS.get(tag)
    if declared is not None:
        return declared
    platforms = list(Platform)
    _restrict(platforms, tag, with_implied=True)
    return tuple(platforms)


@functools.cache
def _deepest_partition_members(tag: TargetTag) -> dict[TargetTag, TargetTag]:
    members = {tag.partition: tag}
    for implied in tag.implied_tags:
        current = members.get(implied.partition)
        if current is None or implied.partition_depth > current.partition_depth:
            members[implied.partition] = implied
    return members


def _same_branch(first: TargetTag, second: TargetTag) -> bool:
    if first.partition is not second.partition:
        return False
    deepest, lightest = (
        (second, first)
        if second.partition_depth > first.partition_depth
        else (first, second)
    )
    node: TargetTag | None = deepest
    while node is not None:
        if node is lightest:
            return True
        node = node.parent
    return False


def _grade_partition_compatibility(tag: TargetTag, requested: TargetTag) -> int:
    # A tag deeper than the requested one in the same partition is too
    # specific (a gluon-only module must not serve a plain openjfx request).
    if (
        tag.partition is requested.partition
        and tag.partition_depth > requested.partition_depth
    ):
        return -1
    grade = 0
    members = _deepest_partition_members(tag)
    for partition, requested_member in _deepest_partition_members(requested).items():
        member = members.get(partition)
        if member is None:
            continue
        if not _same_branch(member, requested_member):
            return -1
        grade += member.partition_depth
    return grade


@dataclass(frozen=True)
class Target:
    """An immutable set of target tags."""

    tags: tuple[TargetTag, ...] = ()

    @classmethod
    def of(cls, *tags: TargetTag) -> Target:
        return cls(tuple(tags))

    @classmethod
    def from_module_name(cls, name: str) -> Target:
        return cls(TargetTag.parse(name, skip_first_token=True))

    def has_tag(self, tag: TargetTag) -> bool:
        return tag in self.tags

    @property
    def supported_platforms(self) -> tuple[Platform, ...]:
        return tuple(p for p in Platform if self.is_platform_supported(p))

    def is_platform_supported(self, platform: Platform) -> bool:
        """True when every tag supports ``platform`` (always true without tags)."""
        return all(tag.supports(platform) for tag in self.tags)

    def is_mono_platform(self, platform: Platform | None = None) -> bool:
        platforms = self.supported_platforms
        if len(platforms) != 1:
            return False
        return platform is None or platforms[0] is platform

    def grade_target_match(self, requested: Target) -> int:
        """Grade this target against a requested one.

        Returns a negative value when incompatible; otherwise the sum of the
        partition depths of the matching tags, so a more specific match scores
        higher. A module carrying several tags (``audio-openjfx-gwt``) is not
        rejected by one of them when another tag is exactly the requested one.
        """
        grade = 0
        for requested_tag in requested.tags:
            for tag in self.tags:
                tag_grade = tag.grade_compatibility(requested_tag)
                if tag_grade < 0 and len(self.tags) > 1 and requested_tag in self.tags:
                    tag_grade = 0
                if tag_grade < 0:
                    return tag_grade
                grade += tag_grade
        return grade

    def is_compatible_with(self, requested: Target) -> bool:
        return self.grade_target_match(requested) >= 0

    def __str__(self) -> str:
        return "-".join(tag.value for tag in self.tags) or "generic"


__all__ = ["Platform", "Target", "TargetTag"]
