"""Maven-layout binary repository client."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from contract.coordinates import ArtifactCoordinates
    from settings.config import RepositoryConfig

logger = logging.getLogger(__name__)


def artifact_relative_path(
    coordinates: ArtifactCoordinates,
    *,
    classifier: str | None = None,
    extension: str = "jar",
) -> str:
    """Path of an artifact below a Maven repository root.

    Examples:
        >>> from contract.coordinates import ArtifactCoordinates
        >>> artifact_relative_path(ArtifactCoordinates("dev.webfx", "webfx-kit", "0.1"))
        'dev/webfx/webfx-kit/0.1/webfx-kit-0.1.jar'
    """
    if coordinates.group_id is None or coordinates.version is None:
        msg = f"Incomplete coordinates {coordinates.gav}"
        raise ValueError(msg)
    group_path = coordinates.group_id.replace(".", "/")
    artifact_id = coordinates.artifact_id
    version = coordinates.version
    file_name = f"{artifact_id}-{version}"
    if classifier:
        file_name = f"{file_name}-{classifier}"
    return f"{group_path}/{artifact_id}/{version}/{file_name}.{extension}"


class MavenRepositoryClient:
    """Looks artifacts up in a local repository and downloads missing ones."""

    def __init__(self, config: RepositoryConfig) -> None:
        self.root = config.local_path()
        self.remote_url = config.remote_url.rstrip("/")
        self.timeout = config.timeout
        self.offline = config.offline

    def local_path(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> Path:
        relative = artifact_relative_path(
            coordinates, classifier=classifier, extension=extension
        )
        return self.root / relative

    def has_local_copy(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> bool:
        path = self.local_path(coordinates, classifier=classifier, extension=extension)
        return path.is_file()

    def download(
        self,
        coordinates: ArtifactCoordinates,
        *,
        classifier: str | None = None,
        extension: str = "jar",
    ) -> Path:
        """Return the local copy, downloading it first when missing.

        Raises:
            FileNotFoundError: Offline and no local copy exists
            requests.RequestException: The download failed
        """
        path = self.local_path(coordinates, classifier=classifier, extension=extension)
        if path.is_file():
            return path
        if self.offline:
            msg = f"{path} is not in the local repository (offline)"
            raise FileNotFoundError(msg)

        relative = artifact_relative_path(
            coordinates, classifier=classifier, extension=extension
        )
        url = f"{self.remote_url}/{relative}"
        logger.debug("Downloading %s", url)
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()

        path.parent.mkdir(parents=True, exist_ok=True)
        partial = Path(f"{path}.part")
        partial.write_bytes(response.content)
        partial.replace(path)
        return path


__all__ = ["MavenRepositoryClient", "artifact_relative_path"]
