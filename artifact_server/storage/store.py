"""Artifact store -- kind-scoped, flat directories of generated files.

Every artifact kind owns one directory below the configured exports root.
The store only knows how to create those directories and how to write,
list, resolve and delete files inside them; naming and retention are
decided by its callers.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
from pydantic import BaseModel

from artifact_server.utils.exceptions import (
    ArtifactNotFoundError,
    FileStorageError,
    PathTraversalError,
)
from artifact_server.utils.file_utils import ensure_dir, is_within
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)


class ArtifactKind(str, Enum):
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    DOCUMENT = "document"
    IMAGE = "image"


class KindSpec(BaseModel):
    """Static facts about one artifact kind."""

    directory: str
    route: str
    prefix: str
    extension: str
    content_type: str
    label: str


KIND_SPECS: dict[ArtifactKind, KindSpec] = {
    ArtifactKind.SPREADSHEET: KindSpec(
        directory="excel-exports",
        route="excel-generator",
        prefix="maia-excel",
        extension="xlsx",
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        label="excel",
    ),
    ArtifactKind.PRESENTATION: KindSpec(
        directory="powerpoint-exports",
        route="powerpoint-generator",
        prefix="your-presentation",
        extension="pptx",
        content_type="application/vnd.openxmlformats-officedocument.presentationml.presentation",
        label="powerpoint",
    ),
    ArtifactKind.DOCUMENT: KindSpec(
        directory="word-exports",
        route="word-generator",
        prefix="word-file",
        extension="docx",
        content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        label="word",
    ),
    ArtifactKind.IMAGE: KindSpec(
        directory="images",
        route="images",
        prefix="image",
        extension="png",
        content_type="image/png",
        label="image",
    ),
}


class ArtifactEntry(BaseModel):
    """A single directory listing entry."""

    file_name: str
    modified_at: datetime


class StoredArtifact(BaseModel):
    """Metadata for an artifact that has been written to disk."""

    kind: ArtifactKind
    file_name: str
    path: str
    size_bytes: int
    modified_at: datetime


class ArtifactStore:
    """Durable storage for generated files, one flat directory per kind.

    Parameters
    ----------
    root_dir:
        Parent directory holding one subdirectory per :class:`ArtifactKind`.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self.root_dir = Path(root_dir)

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def directory(self, kind: ArtifactKind) -> Path:
        return self.root_dir / KIND_SPECS[kind].directory

    def ensure_directory(self, kind: ArtifactKind) -> Path:
        """Create the kind's directory (and parents) if it does not exist."""
        return ensure_dir(self.directory(kind))

    def ensure_all(self) -> None:
        for kind in ArtifactKind:
            path = self.ensure_directory(kind)
            logger.debug("artifact_directory_ready", kind=kind.value, path=str(path))

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    async def write(self, kind: ArtifactKind, file_name: str, content: bytes) -> StoredArtifact:
        """Write *content* and return only once the file is closed.

        Raises
        ------
        FileStorageError
            When the directory is unwritable or the disk is full.
        """
        directory = self.ensure_directory(kind)
        path = directory / file_name
        if not is_within(directory, path):
            raise PathTraversalError(file_name)

        try:
            async with aiofiles.open(path, mode="wb") as fh:
                await fh.write(content)
                await fh.flush()
        except OSError as exc:
            logger.error("artifact_write_failed", kind=kind.value, file_name=file_name, error=str(exc))
            raise FileStorageError(KIND_SPECS[kind].label, str(exc)) from exc

        logger.info(
            "artifact_written",
            kind=kind.value,
            file_name=file_name,
            size_bytes=len(content),
            modified_at=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
        )
        return StoredArtifact(
            kind=kind,
            file_name=file_name,
            path=str(path.resolve()),
            size_bytes=len(content),
            modified_at=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
        )

    def exists(self, kind: ArtifactKind, file_name: str) -> bool:
        path = self.directory(kind) / file_name
        return is_within(self.directory(kind), path) and path.is_file()

    async def delete(self, kind: ArtifactKind, file_name: str) -> bool:
        """Delete a file.  Returns ``False`` if it was already gone."""
        path = self.directory(kind) / file_name
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("artifact_already_deleted", kind=kind.value, file_name=file_name)
            return False
        except OSError as exc:
            raise FileStorageError(KIND_SPECS[kind].label, str(exc)) from exc

        logger.info("artifact_deleted", kind=kind.value, file_name=file_name)
        return True

    def list(self, kind: ArtifactKind) -> Iterator[ArtifactEntry]:
        """Yield a one-shot snapshot of the regular files in *kind*'s directory."""
        with os.scandir(self.directory(kind)) as it:
            entries = [e for e in it if e.is_file(follow_symlinks=False)]

        for entry in entries:
            try:
                mtime = entry.stat(follow_symlinks=False).st_mtime
            except FileNotFoundError:
                continue
            yield ArtifactEntry(
                file_name=entry.name,
                modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
            )

    def resolve(self, kind: ArtifactKind, file_name: str) -> Path:
        """Map a requested file name to a servable path inside the kind root.

        Raises
        ------
        PathTraversalError
            If the resolved path escapes the kind directory.
        ArtifactNotFoundError
            If no such regular file exists (never written, or already swept).
        """
        directory = self.directory(kind)
        if not file_name:
            raise ArtifactNotFoundError(file_name)

        path = directory / file_name
        if not is_within(directory, path):
            logger.warning("path_traversal_rejected", kind=kind.value, file_name=file_name)
            raise PathTraversalError(file_name)

        if not path.is_file():
            raise ArtifactNotFoundError(file_name)

        return path.resolve()
