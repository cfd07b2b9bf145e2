"""
Module: pipeline.text_store

Purpose:
    Hand-off point between text extraction and generation. Extracted
    text is cleaned, stored under a fresh reference, and read back by
    the worker when the job runs.

Key Classes:
    - TextStore: save/read over any KeyValueStore

Used By:
    - pipeline.service: save_text()
    - pipeline.processor: Reads the job's text
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

from handwriting_toolkit.common.text import clean_extracted_text

from .stores import KeyValueStore

logger = logging.getLogger(__name__)


class TextStore:
    """
    Stored source texts keyed by a uuid reference.

    Example:
        >>> texts = TextStore(MemoryStore())
        >>> ref = texts.save("•\\nfirst item")
        >>> texts.read(ref)
        '• first item'
    """

    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    def save(self, text: str) -> str:
        """
        Clean and store `text`.

        Returns:
            Reference for job submission
        """
        ref = str(uuid.uuid4())
        cleaned = clean_extracted_text(text)
        self._kv.put(ref, {"text": cleaned, "created_at": time.time()})
        logger.info(f"Stored text {ref} ({len(cleaned)} characters)")
        return ref

    def read(self, ref: str) -> Optional[str]:
        """The stored text, or None if missing or expired."""
        try:
            record = self._kv.get(ref)
        except ValueError:
            return None
        if record is None:
            return None
        return record.get("text")

    def exists(self, ref: str) -> bool:
        return self.read(ref) is not None

    def sweep(self, older_than: float) -> int:
        return self._kv.sweep(older_than)
