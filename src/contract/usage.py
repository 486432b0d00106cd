"""Static usage reported by the source analyzer for one module."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StaticUsage(BaseModel):
    """Packages, classes and services a module statically references."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    declared_packages: list[str] = Field(
        default_factory=list,
        description="Packages defined by the module's own sources",
    )
    packages: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    required_services: list[str] = Field(default_factory=list)
    optional_services: list[str] = Field(default_factory=list)

    def uses_package(self, package: str) -> bool:
        return package in self.packages

    def uses_class(self, class_name: str) -> bool:
        return class_name in self.classes

    def uses_service(self, spi: str) -> bool:
        return spi in self.required_services or spi in self.optional_services


EMPTY_USAGE = StaticUsage()


__all__ = ["EMPTY_USAGE", "StaticUsage"]
