"""Shared utilities for fxbuild-core."""

from __future__ import annotations


def package_of_class(class_name: str) -> str:
    """Return the package of a fully qualified class name.

    Args:
        class_name: Fully qualified name (e.g., "javafx.application.Application")

    Returns:
        Package name (e.g., "javafx.application"), or "" for a top-level class

    Examples:
        >>> package_of_class("javafx.application.Application")
        'javafx.application'
        >>> package_of_class("Main")
        ''
    """
    head, _, _ = class_name.rpartition(".")
    return head


def application_module_name(executable_name: str) -> str | None:
    """Return the application module an executable module runs.

    An executable module is named after its application module plus a
    platform suffix (``my-app-gwt`` runs ``my-app``).

    Examples:
        >>> application_module_name("my-app-openjfx")
        'my-app'
        >>> application_module_name("standalone") is None
        True
    """
    head, sep, _ = executable_name.rpartition("-")
    return head if sep and head else None
