"""Built-in modules known without any descriptor."""

from __future__ import annotations

from modules.models import LibraryModule

OPENJFX_GROUP_ID = "org.openjfx"
OPENJFX_VERSION = "${openjfx.version}"

# JDK modules: never need an external artifact.
JDK_MODULES: dict[str, tuple[str, ...]] = {
    "java-base": (
        "java.io",
        "java.lang",
        "java.lang.annotation",
        "java.lang.ref",
        "java.lang.reflect",
        "java.math",
        "java.net",
        "java.nio",
        "java.nio.charset",
        "java.nio.file",
        "java.security",
        "java.text",
        "java.time",
        "java.time.format",
        "java.time.temporal",
        "java.util",
        "java.util.concurrent",
        "java.util.concurrent.atomic",
        "java.util.function",
        "java.util.regex",
        "java.util.stream",
    ),
    "java-desktop": ("java.awt", "java.awt.image", "java.beans", "javax.imageio"),
    "java-logging": ("java.util.logging",),
    "java-management": ("java.lang.management", "javax.management"),
    "java-net-http": ("java.net.http",),
    "java-prefs": ("java.util.prefs",),
    "java-scripting": ("javax.script",),
    "java-sql": ("java.sql", "javax.sql"),
    "java-xml": ("javax.xml.parsers", "org.w3c.dom", "org.xml.sax"),
    "jdk-httpserver": ("com.sun.net.httpserver",),
    "jdk-jsobject": ("netscape.javascript",),
}

# The native UI toolkit, published outside any module tree.
OPENJFX_MODULES: dict[str, tuple[str, ...]] = {
    "javafx-base": (
        "javafx.beans",
        "javafx.beans.binding",
        "javafx.beans.property",
        "javafx.beans.value",
        "javafx.collections",
        "javafx.event",
        "javafx.util",
    ),
    "javafx-graphics": (
        "javafx.animation",
        "javafx.application",
        "javafx.geometry",
        "javafx.scene",
        "javafx.scene.image",
        "javafx.scene.layout",
        "javafx.scene.paint",
        "javafx.scene.shape",
        "javafx.scene.text",
        "javafx.stage",
    ),
    "javafx-controls": ("javafx.scene.control", "javafx.scene.chart"),
    "javafx-media": ("javafx.scene.media",),
    "javafx-web": ("javafx.scene.web",),
    "javafx-fxml": ("javafx.fxml",),
}


def platform_modules() -> list[LibraryModule]:
    """A fresh copy of every built-in module, platform modules first."""
    modules = [
        LibraryModule(name, exported_packages=packages, platform=True)
        for name, packages in JDK_MODULES.items()
    ]
    modules.extend(
        LibraryModule(
            name,
            group_id=OPENJFX_GROUP_ID,
            artifact_id=name,
            version=OPENJFX_VERSION,
            exported_packages=packages,
        )
        for name, packages in OPENJFX_MODULES.items()
    )
    return modules


__all__ = [
    "JDK_MODULES",
    "OPENJFX_GROUP_ID",
    "OPENJFX_MODULES",
    "OPENJFX_VERSION",
    "platform_modules",
]
