"""
Module: renderer.layout.canvas

Purpose:
    Raster surface for one page: paper background, jittered glyph
    stamping and hand-drawn strike-throughs.

Key Classes:
    - PageCanvas: One RGB page raster

Key Functions:
    - paint_paper(): Background tint and ruling

Dependencies:
    - PIL: Image, ImageDraw

Used By:
    - renderer.layout.engine
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from PIL import Image, ImageDraw

from handwriting_toolkit.core.models.settings import PaperColor, PaperPattern

from .fonts import Glyph

PAPER_COLORS: Dict[PaperColor, str] = {
    PaperColor.WHITE: "#ffffff",
    PaperColor.WARM: "#f9f5eb",
    PaperColor.VINTAGE: "#f0e6d2",
}

RULE_COLOR = "#e0e0e0"
RULE_COLOR_VINTAGE = "#d1c7b0"
GRID_COLOR = "#d0d0d0"
RULE_WIDTH_PX = 2

_OPACITY_STEPS = 64


def paint_paper(
    image: Image.Image,
    pattern: PaperPattern,
    color: PaperColor,
    *,
    line_height: float,
    top: float,
    bottom: float,
) -> None:
    """
    Draw the paper ruling onto a page already filled with its tint.

    Args:
        image: Page raster (modified in place)
        pattern: Ruling to draw
        color: Paper tint, selects the rule colour
        line_height: Rule spacing in pixels
        top: Top margin in pixels (lined paper starts one line below)
        bottom: Bottom margin in pixels (lined paper stops above it)
    """
    if pattern == PaperPattern.PLAIN or line_height <= 0:
        return

    width, height = image.size
    draw = ImageDraw.Draw(image)

    if pattern == PaperPattern.LINED:
        rule = RULE_COLOR_VINTAGE if color == PaperColor.VINTAGE else RULE_COLOR
        y = top + line_height
        while y < height - bottom:
            draw.line([(0, y), (width, y)], fill=rule, width=RULE_WIDTH_PX)
            y += line_height

    elif pattern == PaperPattern.GRID:
        x = 0.0
        while x <= width:
            draw.line([(x, 0), (x, height)], fill=GRID_COLOR, width=RULE_WIDTH_PX)
            x += line_height
        y = 0.0
        while y <= height:
            draw.line([(0, y), (width, y)], fill=GRID_COLOR, width=RULE_WIDTH_PX)
            y += line_height


class PageCanvas:
    """
    One page raster.

    Glyphs are stamped as ink-coloured fills through a coverage mask,
    which gives per-glyph opacity on an RGB page.

    Attributes:
        image: The RGB page raster
        ink: Ink colour as (r, g, b)
    """

    def __init__(self, width: int, height: int, paper: str, ink: Tuple[int, int, int]):
        self.image = Image.new("RGB", (width, height), paper)
        self.ink = ink
        self._opacity_luts: Dict[int, List[int]] = {}

    def stamp_glyph(
        self,
        glyph: Glyph,
        x: float,
        y: float,
        *,
        angle: float = 0.0,
        scale: float = 1.0,
        opacity: float = 1.0,
    ) -> None:
        """
        Stamp a glyph with its pen origin at (x, y).

        Args:
            glyph: Cached glyph mask
            x: Origin x in pixels
            y: Baseline y in pixels
            angle: Rotation in degrees about the origin
            scale: Uniform scale about the origin
            opacity: Ink opacity 0-1
        """
        mask = glyph.mask
        radius = glyph.radius
        if angle:
            mask = mask.rotate(angle, resample=Image.Resampling.BICUBIC, center=(radius, radius))
        if scale != 1.0:
            side = max(2, int(round(mask.width * scale)))
            mask = mask.resize((side, side), resample=Image.Resampling.BILINEAR)
            radius = side / 2
        if opacity < 1.0:
            mask = mask.point(self._opacity_lut(opacity))

        box = (int(round(x - radius)), int(round(y - radius)))
        self.image.paste(self.ink, box, mask)

    def scribble(self, points: Sequence[Tuple[float, float]], width: float, opacity: float = 1.0) -> None:
        """
        Draw a jagged polyline through `points` in ink.

        Args:
            points: Polyline vertices in page pixels
            width: Stroke width in pixels
            opacity: Ink opacity 0-1
        """
        if len(points) < 2:
            return
        pad = int(width) + 2
        min_x = int(min(p[0] for p in points)) - pad
        min_y = int(min(p[1] for p in points)) - pad
        max_x = int(max(p[0] for p in points)) + pad
        max_y = int(max(p[1] for p in points)) + pad

        mask = Image.new("L", (max_x - min_x, max_y - min_y), 0)
        local = [(px - min_x, py - min_y) for px, py in points]
        ImageDraw.Draw(mask).line(local, fill=int(255 * opacity), width=max(1, int(round(width))), joint="curve")
        self.image.paste(self.ink, (min_x, min_y), mask)

    def _opacity_lut(self, opacity: float) -> List[int]:
        step = int(opacity * _OPACITY_STEPS)
        lut = self._opacity_luts.get(step)
        if lut is None:
            factor = step / _OPACITY_STEPS
            lut = [int(v * factor) for v in range(256)]
            self._opacity_luts[step] = lut
        return lut
