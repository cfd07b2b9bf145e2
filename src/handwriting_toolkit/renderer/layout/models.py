"""
Module: renderer.layout.models

Purpose:
    Data models for page layout.
    Tokens carry their absolute offset in the input so every page
    remainder is an exact suffix of the text it was given.

Key Classes:
    - Token: Word or whitespace run with its input offset
    - Cursor: Mutable pen position in raster pixels
    - PlacedWord: Trace entry for one drawn word (real or mistake)
    - LayoutOutcome: Result of one layout engine invocation
    - Page: Rendered raster with its index in the document

Dependencies:
    - PIL: Image type
    - dataclasses (std)

Used By:
    - renderer.layout.tokenizer: Creates Tokens
    - renderer.layout.engine: Creates LayoutOutcomes
    - renderer.paginator: Creates Pages
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image


@dataclass(frozen=True)
class Token:
    """
    A word or whitespace run within one line (immutable).

    Attributes:
        text: Token text, never containing a newline
        start: Offset of the first character in the page input
        is_space: True for whitespace runs (measured, never drawn)
    """
    text: str
    start: int
    is_space: bool

    @property
    def end(self) -> int:
        """Offset one past the last character."""
        return self.start + len(self.text)


@dataclass
class Cursor:
    """
    Pen position within the current page, in raster pixels.

    `x` resets to the left margin on every wrap, line break and page.
    `y` is the baseline of the current line.
    """
    x: float
    y: float


@dataclass(frozen=True)
class PlacedWord:
    """
    One word drawn on a page.

    Attributes:
        text: Characters drawn
        is_mistake: True for a crossed-out wrong word
        x: Cursor x where drawing started
        y: Baseline y
    """
    text: str
    is_mistake: bool
    x: float
    y: float


@dataclass(frozen=True)
class LayoutOutcome:
    """
    Result of rendering one page.

    Attributes:
        image: Rendered RGB raster
        remainder: Unconsumed suffix of the input text
        consumed: Number of input characters this page consumed
        words: Drawn words in drawing order

    Example:
        >>> outcome.consumed + len(outcome.remainder) == len(text)
        True
    """
    image: Image.Image
    remainder: str
    consumed: int
    words: tuple[PlacedWord, ...] = ()

    @property
    def made_progress(self) -> bool:
        """False when the page consumed nothing."""
        return self.consumed > 0

    @property
    def real_words(self) -> tuple[str, ...]:
        """Correct (non-mistake) words in drawing order."""
        return tuple(w.text for w in self.words if not w.is_mistake)


@dataclass(frozen=True)
class Page:
    """
    One rendered page of a document (immutable).

    Attributes:
        index: Position in the document, 0-indexed
        image: Rendered raster
    """
    index: int
    image: Image.Image
