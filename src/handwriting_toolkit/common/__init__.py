"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .text import clean_extracted_text, normalise_newlines

__all__ = [
    "clean_extracted_text",
    "normalise_newlines",
]
