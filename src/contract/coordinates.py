"""Published-artifact coordinates."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ArtifactCoordinates:
    """A concrete published artifact identity plus its declaration details."""

    group_id: str | None
    artifact_id: str
    version: str | None = None
    scope: str | None = None
    classifier: str | None = None
    type: str | None = None

    @property
    def key(self) -> str:
        """``groupId:artifactId``, the identity used for de-duplication."""
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def gav(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def __str__(self) -> str:
        text = self.gav
        if self.classifier:
            text = f"{text}:{self.classifier}"
        if self.scope:
            text = f"{text} ({self.scope})"
        return text


__all__ = ["ArtifactCoordinates"]
