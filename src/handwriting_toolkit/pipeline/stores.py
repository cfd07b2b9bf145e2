"""
Module: pipeline.stores

Purpose:
    Small key/value stores for extracted text and job records.
    Both implementations timestamp every write so the cleanup
    scheduler can expire old entries.

Key Classes:
    - KeyValueStore: Abstract interface
    - MemoryStore: In-process dict (tests, single-process use)
    - JsonFileStore: One JSON file per key, locked with portalocker

Dependencies:
    - portalocker (via pipeline.file_locking): Cross-process locking

Used By:
    - pipeline.text_store: Text persistence
    - pipeline.service: Job record persistence
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .file_locking import locked_file, locked_read_json, locked_write_json

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """Minimal record store keyed by string ids."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the record for `key`, or None."""

    @abstractmethod
    def put(self, key: str, value: Dict[str, Any]) -> None:
        """Insert or replace the record for `key`."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove `key`; True if something was removed."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All keys currently stored."""

    @abstractmethod
    def updated_at(self, key: str) -> Optional[float]:
        """Epoch seconds of the last write to `key`, or None."""

    def sweep(self, older_than: float) -> int:
        """
        Delete every record last written before `older_than`.

        Args:
            older_than: Epoch seconds cut-off

        Returns:
            Number of records removed
        """
        removed = 0
        for key in self.keys():
            stamp = self.updated_at(key)
            if stamp is not None and stamp < older_than and self.delete(key):
                removed += 1
        if removed:
            logger.info(f"{type(self).__name__}: swept {removed} expired records")
        return removed


class MemoryStore(KeyValueStore):
    """Thread-safe in-memory store."""

    def __init__(self):
        self._data: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._data.get(key)
        return dict(entry[1]) if entry else None

    def put(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = (time.time(), dict(value))

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def updated_at(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._data.get(key)
        return entry[0] if entry else None


class JsonFileStore(KeyValueStore):
    """
    Directory of `<key>.json` files.

    Writes are atomic (temp file + rename) under an exclusive portalocker
    lock on `<root>/.lock`; reads take a shared lock. The file's mtime is
    the record timestamp.

    Attributes:
        root: Directory holding the records

    Example:
        >>> store = JsonFileStore(Path("data/jobs"))
        >>> store.put("abc", {"status": "queued"})
        >>> store.get("abc")
        {'status': 'queued'}
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock_path = self.root / ".lock"

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        try:
            return locked_read_json(path, self._lock_path)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt record {path.name}: {e}")
            return None

    def put(self, key: str, value: Dict[str, Any]) -> None:
        locked_write_json(self._path(key), value, self._lock_path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        with locked_file(self._lock_path, 'a'):
            if not path.exists():
                return False
            path.unlink()
        return True

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))

    def updated_at(self, key: str) -> Optional[float]:
        try:
            return self._path(key).stat().st_mtime
        except FileNotFoundError:
            return None
