"""
Module: renderer.layout.engine

Purpose:
    Lay out and rasterize one handwritten page from the front of a text,
    returning the page and the text that did not fit.

Key Functions:
    - render_page(): Main layout entry point

Algorithm:
    1. Scale settings from design units to raster pixels
    2. Split text into lines, lines into word/whitespace tokens
    3. Whitespace advances the cursor (with jitter), never drawn
    4. Words wrap at the right margin; a wrap past the bottom margin
       ends the page and the remainder starts at that word
    5. With probability error_rate a crossed-out wrong word precedes
       the real word
    6. Every glyph is drawn with position, rotation, scale and opacity
       jitter from the injected random source
    7. A word wider than the printable width ends the page without
       consuming it (zero progress when it is the first token); the
       pagination driver forces progress in that case

Dependencies:
    - PIL (via canvas and fonts)
    - random (std): Injected seeded source

Used By:
    - renderer.paginator: Called once per page
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from handwriting_toolkit.core.models.settings import Settings

from .canvas import PAPER_COLORS, PageCanvas, paint_paper
from .config import PageGeometry
from .fonts import FontProvider, GlyphAtlas
from .mistakes import (
    MISTAKE_GAP,
    STRIKE_HEIGHT_RATIO,
    STRIKE_OPACITY,
    STRIKE_OVERHANG,
    STRIKE_WIDTH,
    make_wrong_word,
    strike_through_points,
)
from .models import Cursor, LayoutOutcome, PlacedWord
from .tokenizer import measurable_space, split_lines, tokenize_line

logger = logging.getLogger(__name__)

_default_fonts: Optional[FontProvider] = None


def _shared_fonts() -> FontProvider:
    global _default_fonts
    if _default_fonts is None:
        _default_fonts = FontProvider()
    return _default_fonts


class _PageWriter:
    """Draws jittered glyphs for one page and advances the cursor."""

    def __init__(
        self,
        canvas: PageCanvas,
        atlas: GlyphAtlas,
        settings: Settings,
        rng: random.Random,
        scale: float,
        font_px: float,
    ):
        self.canvas = canvas
        self.atlas = atlas
        self.settings = settings
        self.rng = rng
        self.scale = scale
        self.font_px = font_px

    def draw_character(self, char: str, x: float, y: float) -> None:
        rnd = self.settings.randomization
        rng = self.rng
        jitter = rnd.baseline_jitter * self.scale
        dx = rng.uniform(-jitter, jitter)
        dy = rng.uniform(-jitter, jitter)
        angle = rng.uniform(-rnd.rotation_jitter, rnd.rotation_jitter)
        size = 1 + (rng.random() - 0.5) * rnd.size_jitter
        opacity = min(1.0, max(0.1, 1 - rng.random() * rnd.ink_opacity))
        stroke = int(round(rng.random() * rnd.stroke_width * self.scale))

        glyph = self.atlas.glyph(char, stroke)
        self.canvas.stamp_glyph(glyph, x + dx, y + dy, angle=angle, scale=size, opacity=opacity)

    def write_word(self, word: str, cursor: Cursor) -> None:
        spread = self.settings.letter_spacing * self.scale
        for char in word:
            self.draw_character(char, cursor.x, cursor.y)
            cursor.x += self.atlas.advance(char) + (self.rng.random() - 0.5) * spread

    def write_mistake(self, wrong: str, cursor: Cursor) -> None:
        wrong_width = self.atlas.advance(wrong)
        for char in wrong:
            self.draw_character(char, cursor.x, cursor.y)
            cursor.x += self.atlas.advance(char) + (self.rng.random() - 0.5) * self.scale

        overhang = STRIKE_OVERHANG * self.scale
        points = strike_through_points(
            self.rng,
            cursor.x - wrong_width - overhang,
            cursor.x + overhang,
            cursor.y - self.font_px * STRIKE_HEIGHT_RATIO,
            self.scale,
        )
        self.canvas.scribble(points, STRIKE_WIDTH * self.scale, STRIKE_OPACITY)
        cursor.x += MISTAKE_GAP * self.scale


def render_page(
    text: str,
    settings: Settings,
    rng: random.Random,
    geometry: Optional[PageGeometry] = None,
    *,
    fonts: Optional[FontProvider] = None,
) -> LayoutOutcome:
    """
    Render the front of `text` onto one page.

    Deterministic for a given (text, settings, rng state, geometry):
    all randomness comes from `rng`, which the caller seeds per job and
    threads through successive pages.

    Args:
        text: Remaining text for the job
        settings: Immutable settings snapshot
        rng: Seeded random source
        geometry: Output raster geometry (default A4 at 150 DPI)
        fonts: Font provider (default: shared provider with no font dir)

    Returns:
        LayoutOutcome whose remainder is an exact suffix of `text`

    Raises:
        FontLoadError: If no font can be loaded
        OSError: On Pillow raster failures

    Example:
        >>> outcome = render_page("Hello world", Settings(), random.Random(1))
        >>> outcome.remainder
        ''
    """
    geometry = geometry or PageGeometry()
    fonts = fonts or _shared_fonts()
    scale = geometry.scale

    font_px = settings.font_size * scale
    line_height = font_px * settings.line_spacing
    margins = settings.margins
    left = margins.left * scale
    right_limit = geometry.width - margins.right * scale
    bottom_limit = geometry.height - margins.bottom * scale
    printable_width = right_limit - left
    error_rate = settings.randomization.error_rate

    atlas = fonts.atlas(settings.font_family, font_px)
    canvas = PageCanvas(
        geometry.width,
        geometry.height,
        PAPER_COLORS[settings.paper_color],
        settings.ink_rgb,
    )
    paint_paper(
        canvas.image,
        settings.paper_pattern,
        settings.paper_color,
        line_height=line_height,
        top=margins.top * scale,
        bottom=margins.bottom * scale,
    )
    writer = _PageWriter(canvas, atlas, settings, rng, scale, font_px)
    cursor = Cursor(left, margins.top * scale + font_px)
    words: List[PlacedWord] = []

    def finish(stop: int) -> LayoutOutcome:
        return LayoutOutcome(
            image=canvas.image,
            remainder=text[stop:],
            consumed=stop,
            words=tuple(words),
        )

    def wrap() -> bool:
        cursor.x = left
        cursor.y += line_height
        return cursor.y <= bottom_limit

    if cursor.y > bottom_limit:
        logger.debug("First baseline falls below the bottom margin, nothing fits")
        return finish(0)

    lines = split_lines(text)
    for i, (line_start, line) in enumerate(lines):
        for token in tokenize_line(line, line_start):
            if token.is_space:
                width = atlas.advance(measurable_space(token.text))
                jitter = (rng.random() - 0.5) * settings.word_spacing * len(token.text) * scale
                cursor.x += width + jitter
                continue

            word = token.text
            word_width = atlas.advance(word)
            if word_width > printable_width:
                logger.debug(
                    f"Token of {len(word)} chars is {word_width:.0f}px wide, "
                    f"printable width is {printable_width:.0f}px"
                )
                return finish(token.start)

            if cursor.x + word_width > right_limit and not wrap():
                return finish(token.start)

            if rng.random() < error_rate:
                wrong = make_wrong_word(word)
                if cursor.x + atlas.advance(wrong) < right_limit:
                    words.append(PlacedWord(wrong, True, cursor.x, cursor.y))
                    writer.write_mistake(wrong, cursor)
                    if cursor.x + word_width > right_limit and not wrap():
                        return finish(token.start)

            words.append(PlacedWord(word, False, cursor.x, cursor.y))
            writer.write_word(word, cursor)

        if i < len(lines) - 1:
            cursor.x = left
            cursor.y += line_height
            if cursor.y > bottom_limit:
                return finish(lines[i + 1][0])

    return finish(len(text))
