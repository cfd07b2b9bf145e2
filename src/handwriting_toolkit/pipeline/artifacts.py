"""
Module: pipeline.artifacts

Purpose:
    Durable storage for finished PDFs. A job's artifact is written once,
    after the document is finalized; a reference is returned for status
    queries and result retrieval.

Key Classes:
    - ArtifactStore: Abstract interface
    - LocalArtifactStore: Files under a directory, optionally served by URL
    - FallbackArtifactStore: Primary store with a single fallback attempt

Dependencies:
    - pipeline.file_locking: Atomic writes

Used By:
    - pipeline.processor: Persists finalized documents
    - pipeline.service: Result retrieval and cleanup
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional

from handwriting_toolkit.core.models.jobs import ArtifactReference

from .errors import StorageFailure
from .file_locking import atomic_write_bytes

logger = logging.getLogger(__name__)

_JOB_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class ArtifactStore(ABC):
    """Write-once store for generated documents."""

    name = "artifact"

    @abstractmethod
    def write(self, data: bytes, job_id: str) -> ArtifactReference:
        """
        Persist a finished document.

        Raises:
            OSError: If the write fails
        """

    @abstractmethod
    def open(self, ref: ArtifactReference) -> BinaryIO:
        """
        Open a stored document for reading.

        Raises:
            FileNotFoundError: If the artifact no longer exists
        """

    @abstractmethod
    def sweep(self, older_than: float) -> int:
        """Delete artifacts last modified before `older_than` (epoch seconds)."""


class LocalArtifactStore(ArtifactStore):
    """
    Artifacts as `<job_id>.pdf` files under `root`.

    With `public_base_url` set, references are remote-style URLs
    (`<base>/<job_id>.pdf`) so callers are redirected to whatever serves
    the directory; otherwise the reference is the file path.

    Attributes:
        root: Output directory
        public_base_url: Base URL the directory is served under, if any
    """

    def __init__(self, root: Path, public_base_url: Optional[str] = None, *, name: str = "local"):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.name = name

    def path_for(self, job_id: str) -> Path:
        if not _JOB_ID_RE.match(job_id):
            raise ValueError(f"Invalid job id: {job_id!r}")
        return self.root / f"{job_id}.pdf"

    def write(self, data: bytes, job_id: str) -> ArtifactReference:
        path = self.path_for(job_id)
        atomic_write_bytes(path, data, suffix=".pdf.tmp")
        logger.info(f"Saved artifact {path} ({len(data)} bytes)")

        if self.public_base_url:
            return ArtifactReference(
                location=f"{self.public_base_url}/{path.name}",
                is_remote=True,
                store=self.name,
            )
        return ArtifactReference(location=str(path), store=self.name)

    def open(self, ref: ArtifactReference) -> BinaryIO:
        if ref.is_remote:
            path = self.root / ref.location.rsplit("/", 1)[-1]
        else:
            path = Path(ref.location)
        return open(path, "rb")

    def sweep(self, older_than: float) -> int:
        if not self.root.exists():
            return 0
        removed = 0
        for path in self.root.glob("*.pdf"):
            try:
                if path.stat().st_mtime < older_than:
                    path.unlink()
                    removed += 1
                    logger.debug(f"Deleted expired artifact {path.name}")
            except OSError as e:
                logger.error(f"Error sweeping {path.name}: {e}")
        if removed:
            logger.info(f"{self.name}: swept {removed} expired artifacts")
        return removed


class FallbackArtifactStore(ArtifactStore):
    """
    Try `primary`; on failure log a warning and try `fallback` once.

    Raises StorageFailure when both stores fail. Reads and sweeps are
    routed by the reference's store name.
    """

    name = "fallback"

    def __init__(self, primary: ArtifactStore, fallback: ArtifactStore):
        self.primary = primary
        self.fallback = fallback

    def write(self, data: bytes, job_id: str) -> ArtifactReference:
        try:
            return self.primary.write(data, job_id)
        except (OSError, ValueError) as e:
            logger.warning(f"[{job_id}] Primary store '{self.primary.name}' failed ({e}); trying '{self.fallback.name}'")

        try:
            return self.fallback.write(data, job_id)
        except (OSError, ValueError) as e:
            logger.error(f"[{job_id}] Fallback store '{self.fallback.name}' failed: {e}")
            raise StorageFailure(f"Both artifact stores failed for job {job_id}") from e

    def open(self, ref: ArtifactReference) -> BinaryIO:
        store = self.fallback if ref.store == self.fallback.name else self.primary
        return store.open(ref)

    def sweep(self, older_than: float) -> int:
        return self.primary.sweep(older_than) + self.fallback.sweep(older_than)
