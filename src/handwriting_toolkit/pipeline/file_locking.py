"""
Module: pipeline.file_locking

Purpose:
    Cross-platform file locking for the on-disk stores, so a service
    process and a cleanup sweep (or a second service on the same data
    directory) never see half-written records.
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_file: Context manager for locked file access
    - atomic_write_bytes: Temp-file write followed by rename
    - locked_write_json: Serialize a record and replace it atomically under a lock
    - locked_read_json: Read a record under a shared lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - pipeline.stores: JsonFileStore
    - pipeline.artifacts: LocalArtifactStore
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'w', 'a', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(store_root / ".lock", 'a'):
        ...     replace_record()
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Ensure file exists for read modes
    if 'r' in mode and not path.exists():
        path.touch()

    with open(path, mode, encoding='utf-8') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def atomic_write_bytes(path: Path, data: bytes, suffix: str = ".tmp") -> None:
    """
    Write bytes so readers see either the old file or the complete new one.

    Args:
        path: Final destination.
        data: Content to write.
        suffix: Suffix for the temporary file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        suffix=suffix,
        dir=path.parent,
        delete=False,
    ) as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
        temp_path = Path(f.name)

    try:
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def locked_write_json(path: Path, record: Dict[str, Any], lock_path: Path) -> None:
    """
    Replace a JSON record atomically while holding an exclusive lock.

    The lock lives on a separate file because the record itself is
    swapped out by rename.

    Args:
        path: Record file.
        record: Dictionary to write.
        lock_path: Lock file guarding the record's directory.
    """
    payload = json.dumps(record, indent=2, ensure_ascii=False).encode("utf-8")
    with locked_file(lock_path, 'a', portalocker.LOCK_EX):
        atomic_write_bytes(path, payload, suffix=".json.tmp")

    logger.debug(f"Wrote record {path.name}")


def locked_read_json(path: Path, lock_path: Path) -> Optional[Dict[str, Any]]:
    """
    Read a JSON record under a shared lock.

    Returns:
        The record, or None if the file does not exist.

    Raises:
        json.JSONDecodeError: If the record is corrupt.
    """
    with locked_file(lock_path, 'a', portalocker.LOCK_SH):
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))
