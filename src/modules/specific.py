"""Well-known module names that resolve by special rules."""

from __future__ import annotations

# Emulation module -> native platform artifact it stands in for.
EMULATION_TO_NATIVE: dict[str, str] = {
    "webfx-kit-javafxbase-emul": "javafx-base",
    "webfx-kit-javafxgraphics-emul": "javafx-graphics",
    "webfx-kit-javafxcontrols-emul": "javafx-controls",
    "webfx-kit-javafxmedia-emul": "javafx-media",
}

NATIVE_TO_EMULATION: dict[str, str] = {
    native: emulation for emulation, native in EMULATION_TO_NATIVE.items()
}

# The catalog lists the emulation as the provider of record for this artifact.
CATALOG_REDIRECTS: dict[str, str] = {
    "javafx-graphics": "webfx-kit-javafxgraphics-emul",
}

# Pulled in as sources by the web compiler itself.
WEB_EXECUTABLE_DROPPED = frozenset(
    {
        "elemental2-core",
        "elemental2-dom",
        "jsinterop-base",
        "jsinterop-annotations",
        "javafx-base",
        "javafx-graphics",
        "javafx-controls",
        "javafx-media",
    }
)

WEB_EXECUTABLE_SUBSTITUTES: dict[str, str] = {
    "gwt-user": "gwt-dev",
}

# Platform-emulation modules whose own artifact is only needed when compiling
# a web executable.
PLATFORM_EMULATION_ARTIFACTS: dict[str, str] = {
    "java-nio-emul": "gwt-nio",
}

PLATFORM_PREFIXES = ("java-", "jdk-")

UI_TOOLKIT_MODULES = frozenset(EMULATION_TO_NATIVE) | frozenset(NATIVE_TO_EMULATION)

RUNTIME_SCOPED_MODULES = frozenset({"slf4j-api"})

# Modules consumed by the web compiler as binaries, never as sources.
SOURCES_CLASSIFIER_EXCLUDED_PREFIXES = ("gwt-", "elemental2-")
SOURCES_CLASSIFIER_EXCLUDED = frozenset(
    {"java-nio-emul", "org.jresearch.gwt.time.tzdb"}
)

# Emulation modules injected into executables per platform.
WEB_EXECUTABLE_EMULATION = (
    "webfx-kit-gwt",
    "webfx-platform-gwt-emul-javabase",
    "gwt-time",
)
DESKTOP_EXECUTABLE_EMULATION = (
    "webfx-kit-openjfx",
    "webfx-platform-java-boot-impl",
)
MEDIA_EMULATION = "webfx-kit-javafxmedia-emul"


def is_platform_module_name(name: str) -> bool:
    return name.startswith(PLATFORM_PREFIXES)


def is_emulation_module_name(name: str) -> bool:
    return name in EMULATION_TO_NATIVE


def is_shaded_emulation_name(name: str) -> bool:
    """Emulation libraries already shipped as shaded sources."""
    return "-gwt-emul-" in name or name.endswith("-emul-gwt")


__all__ = [
    "CATALOG_REDIRECTS",
    "DESKTOP_EXECUTABLE_EMULATION",
    "EMULATION_TO_NATIVE",
    "MEDIA_EMULATION",
    "NATIVE_TO_EMULATION",
    "PLATFORM_EMULATION_ARTIFACTS",
    "PLATFORM_PREFIXES",
    "RUNTIME_SCOPED_MODULES",
    "SOURCES_CLASSIFIER_EXCLUDED",
    "SOURCES_CLASSIFIER_EXCLUDED_PREFIXES",
    "UI_TOOLKIT_MODULES",
    "WEB_EXECUTABLE_DROPPED",
    "WEB_EXECUTABLE_EMULATION",
    "WEB_EXECUTABLE_SUBSTITUTES",
    "is_emulation_module_name",
    "is_platform_module_name",
    "is_shaded_emulation_name",
]
