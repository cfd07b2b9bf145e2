"""
Module: renderer.layout.fonts

Purpose:
    Resolve handwriting font families to Pillow fonts and cache
    per-character glyph masks so jittered glyphs can be stamped quickly.

Key Classes:
    - FontProvider: Family + pixel size -> FreeTypeFont, with fallbacks
    - GlyphAtlas: Per-font cache of glyph masks and advances
    - Glyph: One cached mask with its baseline origin
    - FontLoadError: No usable font could be loaded

Dependencies:
    - PIL: ImageFont, ImageDraw

Used By:
    - renderer.layout.engine: Measuring and drawing glyphs
    - pipeline.processor: One provider per worker
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

FONT_FILES = {
    "Caveat": "Caveat-Regular.ttf",
    "Indie Flower": "IndieFlower-Regular.ttf",
    "Patrick Hand": "PatrickHand-Regular.ttf",
    "Shadows Into Light": "ShadowsIntoLight.ttf",
    "Homemade Apple": "HomemadeApple-Regular.ttf",
    "Gloria Hallelujah": "GloriaHallelujah.ttf",
    "Kalam": "Kalam-Regular.ttf",
    "Handlee": "Handlee-Regular.ttf",
    "Architects Daughter": "ArchitectsDaughter-Regular.ttf",
    "Nothing You Could Do": "NothingYouCouldDo.ttf",
}

# Tried in order when the family's own file is not installed
SYSTEM_FALLBACKS = (
    "DejaVuSans.ttf",
    "arial.ttf",
    "Arial.ttf",
)


class FontLoadError(Exception):
    """No usable font could be loaded for a family."""
    pass


@dataclass(frozen=True)
class Glyph:
    """
    Cached glyph mask.

    The mask is square with the pen origin (baseline, left) at its
    centre, so it can be rotated about the origin without clipping.

    Attributes:
        mask: 8-bit coverage mask
        radius: Half the mask side; origin is at (radius, radius)
        advance: Horizontal advance in pixels
    """
    mask: Image.Image
    radius: int
    advance: float


class GlyphAtlas:
    """
    Glyph mask cache for one font.

    Example:
        >>> atlas = GlyphAtlas(font)
        >>> atlas.glyph("a").advance > 0
        True
    """

    def __init__(self, font: ImageFont.FreeTypeFont):
        self.font = font
        self._glyphs: Dict[Tuple[str, int], Glyph] = {}
        self._advances: Dict[str, float] = {}

    def advance(self, text: str) -> float:
        """Measured width of `text` in pixels."""
        if len(text) == 1:
            cached = self._advances.get(text)
            if cached is None:
                cached = self.font.getlength(text)
                self._advances[text] = cached
            return cached
        return self.font.getlength(text)

    def glyph(self, char: str, stroke: int = 0) -> Glyph:
        """Get (or build) the mask for `char` drawn with `stroke` px outline."""
        key = (char, stroke)
        cached = self._glyphs.get(key)
        if cached is not None:
            return cached

        left, top, right, bottom = self.font.getbbox(char, anchor="ls", stroke_width=stroke)
        corners = ((left, top), (right, top), (left, bottom), (right, bottom))
        radius = int(math.ceil(max(math.hypot(x, y) for x, y in corners))) + 2
        mask = Image.new("L", (2 * radius, 2 * radius), 0)
        ImageDraw.Draw(mask).text(
            (radius, radius),
            char,
            font=self.font,
            fill=255,
            anchor="ls",
            stroke_width=stroke,
            stroke_fill=255,
        )
        glyph = Glyph(mask=mask, radius=radius, advance=self.advance(char))
        self._glyphs[key] = glyph
        return glyph


class FontProvider:
    """
    Resolves font families to Pillow fonts.

    Lookup order: `fonts_dir/<family file>`, then SYSTEM_FALLBACKS, then
    Pillow's bundled scalable default font. Results are cached per
    (family, size) together with their GlyphAtlas.

    Attributes:
        fonts_dir: Directory holding the handwriting TTF files
    """

    def __init__(self, fonts_dir: Optional[Path] = None):
        self.fonts_dir = Path(fonts_dir) if fonts_dir is not None else None
        self._atlases: Dict[Tuple[str, int], GlyphAtlas] = {}
        self._warned: set[str] = set()
        self._lock = threading.Lock()

    def atlas(self, family: str, size_px: float) -> GlyphAtlas:
        """
        Get the glyph atlas for a family at a pixel size.

        Args:
            family: Font family name
            size_px: Font size in raster pixels

        Returns:
            GlyphAtlas wrapping the resolved font

        Raises:
            FontLoadError: If no font at all can be loaded
        """
        size = max(1, int(round(size_px)))
        key = (family, size)
        with self._lock:
            atlas = self._atlases.get(key)
            if atlas is None:
                atlas = GlyphAtlas(self._load(family, size))
                self._atlases[key] = atlas
            return atlas

    def _load(self, family: str, size: int) -> ImageFont.FreeTypeFont:
        filename = FONT_FILES.get(family)
        if filename and self.fonts_dir is not None:
            path = self.fonts_dir / filename
            if path.exists():
                try:
                    return ImageFont.truetype(str(path), size)
                except OSError as e:
                    raise FontLoadError(f"Could not load font file {path}: {e}") from e

        if family not in self._warned:
            self._warned.add(family)
            logger.warning(f"Font '{family}' not installed, using fallback font")

        for font_name in SYSTEM_FALLBACKS:
            try:
                return ImageFont.truetype(font_name, size)
            except OSError:
                continue

        font = ImageFont.load_default(size=size)
        if not isinstance(font, ImageFont.FreeTypeFont):
            raise FontLoadError("No scalable font available (Pillow built without FreeType)")
        return font
