"""
Module: renderer.paginator

Purpose:
    Drive the layout engine across an arbitrarily long text, one page at
    a time, until the text is exhausted or the page ceiling is hit.

Key Functions:
    - paginate(): Main pagination loop
    - compute_progress(): Consumed share of the original text

Key Classes:
    - PaginationResult: Pages produced, truncation and degradation info
    - PageSegment: Text consumed (and force-dropped) by one page

Algorithm:
    1. Render one page from the remaining text
    2. Hand the page to the caller (the document assembler)
    3. No progress -> drop a fixed-size prefix and record a degraded
       page; otherwise continue from the engine's remainder
    4. Report progress after every page
    Pages are strictly sequential: page N's remainder is page N+1's input.

Dependencies:
    - renderer.layout: render_page
    - renderer.timing: Per-page timings

Used By:
    - pipeline.processor: Job execution
    - cli: Direct rendering
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from handwriting_toolkit.core.models.settings import Settings

from .layout import FontProvider, Page, PageGeometry, render_page
from .timing import RenderTimings, timed_phase

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 500
DEFAULT_CHUNK_SIZE = 100


@dataclass(frozen=True)
class PageSegment:
    """
    Text accounted for by one page.

    Attributes:
        index: Page index
        consumed_text: Prefix the engine laid out on this page
        dropped_text: Prefix force-dropped after a no-progress page
    """
    index: int
    consumed_text: str
    dropped_text: str = ""

    @property
    def degraded(self) -> bool:
        """True when this page needed the forced-chunk fallback."""
        return bool(self.dropped_text)


@dataclass
class PaginationResult:
    """
    Outcome of paginating one text.

    Attributes:
        page_count: Pages produced
        truncated: Ceiling reached with text remaining
        remaining_chars: Characters left unrendered
        segments: Per-page consumed/dropped text, in page order
        warnings: Degraded-page and truncation messages
        timings: Per-page render timings

    Example:
        >>> result = paginate("Hello world", settings)
        >>> result.page_count, result.truncated
        (1, False)
    """
    page_count: int = 0
    truncated: bool = False
    remaining_chars: int = 0
    segments: List[PageSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    timings: RenderTimings = field(default_factory=RenderTimings)

    @property
    def degraded_pages(self) -> int:
        """Number of pages that needed the forced-chunk fallback."""
        return sum(1 for s in self.segments if s.degraded)

    @property
    def rendered_text(self) -> str:
        """Concatenation of every page's consumed text."""
        return "".join(s.consumed_text for s in self.segments)


def compute_progress(original_length: int, remaining_length: int) -> float:
    """
    Percentage of the original text consumed, clamped to [0, 100].

    Example:
        >>> compute_progress(200, 50)
        75.0
    """
    if original_length <= 0:
        return 100.0
    value = (original_length - remaining_length) / original_length * 100
    return max(0.0, min(100.0, value))


def paginate(
    text: str,
    settings: Settings,
    *,
    geometry: Optional[PageGeometry] = None,
    rng: Optional[random.Random] = None,
    fonts: Optional[FontProvider] = None,
    max_pages: int = DEFAULT_MAX_PAGES,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_page: Optional[Callable[[Page], None]] = None,
    on_progress: Optional[Callable[[float], None]] = None,
) -> PaginationResult:
    """
    Render `text` page by page.

    Args:
        text: Full text for the job
        settings: Immutable settings snapshot
        geometry: Output raster geometry
        rng: Random source; defaults to Random(settings.seed)
        fonts: Font provider passed to the engine
        max_pages: Hard page ceiling
        chunk_size: Characters dropped when a page makes no progress
        on_page: Receives each Page in order (e.g. the assembler)
        on_progress: Receives progress 0-100 after each page

    Returns:
        PaginationResult

    Raises:
        ValueError: If max_pages or chunk_size is not positive
        FontLoadError / OSError: Propagated from the layout engine
    """
    if max_pages <= 0:
        raise ValueError(f"max_pages must be positive: {max_pages}")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive: {chunk_size}")

    rng = rng if rng is not None else random.Random(settings.seed)
    result = PaginationResult()
    original_length = len(text)
    remaining = text

    while remaining and result.page_count < max_pages:
        index = result.page_count

        with timed_phase(result.timings, "layout", page_index=index):
            outcome = render_page(remaining, settings, rng, geometry, fonts=fonts)

        if on_page is not None:
            with timed_phase(result.timings, "hand_off", page_index=index):
                on_page(Page(index=index, image=outcome.image))
        result.page_count += 1

        if len(outcome.remainder) == len(remaining):
            dropped = remaining[:chunk_size]
            remaining = remaining[chunk_size:]
            message = (
                f"Page {index} made no progress; dropped {len(dropped)} characters "
                f"({len(remaining)} remaining)"
            )
            logger.warning(message)
            result.warnings.append(message)
            result.segments.append(PageSegment(index=index, consumed_text="", dropped_text=dropped))
        else:
            result.segments.append(PageSegment(index=index, consumed_text=remaining[: outcome.consumed]))
            remaining = outcome.remainder

        if on_progress is not None:
            on_progress(compute_progress(original_length, len(remaining)))

    result.remaining_chars = len(remaining)
    if remaining:
        result.truncated = True
        message = (
            f"Page ceiling of {max_pages} reached with {len(remaining)} characters "
            f"left unrendered"
        )
        logger.warning(message)
        result.warnings.append(message)

    logger.info(
        f"Paginated {original_length} characters onto {result.page_count} pages "
        f"({result.degraded_pages} degraded)"
    )
    return result
