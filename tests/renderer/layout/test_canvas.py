"""Tests for paper painting and glyph stamping."""

import random

from PIL import Image

from handwriting_toolkit.core.models.settings import PaperColor, PaperPattern
from handwriting_toolkit.renderer.layout.canvas import (
    GRID_COLOR,
    PAPER_COLORS,
    RULE_COLOR_VINTAGE,
    PageCanvas,
    paint_paper,
)
from handwriting_toolkit.renderer.layout.mistakes import strike_through_points


def _rgb(hex_color):
    return Image.new("RGB", (1, 1), hex_color).getpixel((0, 0))


class TestPaintPaper:
    """Tests for paint_paper."""

    def test_paint_when_plain_then_only_tint(self):
        image = Image.new("RGB", (100, 200), PAPER_COLORS[PaperColor.WARM])
        paint_paper(image, PaperPattern.PLAIN, PaperColor.WARM, line_height=20, top=10, bottom=10)
        assert image.getcolors() == [(100 * 200, _rgb("#f9f5eb"))]

    def test_paint_when_lined_vintage_then_vintage_rules_inside_margins(self):
        image = Image.new("RGB", (100, 200), PAPER_COLORS[PaperColor.VINTAGE])
        paint_paper(image, PaperPattern.LINED, PaperColor.VINTAGE, line_height=30, top=20, bottom=40)

        column = [image.getpixel((50, y)) for y in range(200)]
        rule_rows = [y for y, px in enumerate(column) if px == _rgb(RULE_COLOR_VINTAGE)]
        assert rule_rows
        assert min(rule_rows) >= 20 + 30 - 2
        assert max(rule_rows) < 200 - 40 + 2

    def test_paint_when_grid_then_vertical_and_horizontal_rules(self):
        image = Image.new("RGB", (120, 120), PAPER_COLORS[PaperColor.WHITE])
        paint_paper(image, PaperPattern.GRID, PaperColor.WHITE, line_height=40, top=0, bottom=0)

        grid = _rgb(GRID_COLOR)
        assert any(image.getpixel((x, 20)) == grid for x in range(120))
        assert any(image.getpixel((20, y)) == grid for y in range(120))


class TestPageCanvas:
    """Tests for PageCanvas."""

    def test_stamp_when_full_opacity_then_ink_pixels(self, fonts):
        canvas = PageCanvas(200, 200, "#ffffff", (0, 0, 0))
        glyph = fonts.atlas("Caveat", 60).glyph("H")

        canvas.stamp_glyph(glyph, 50, 120)

        assert (0, 0, 0) in [c for _, c in canvas.image.getcolors(200 * 200)]

    def test_stamp_when_low_opacity_then_no_full_ink(self, fonts):
        canvas = PageCanvas(200, 200, "#ffffff", (0, 0, 0))
        glyph = fonts.atlas("Caveat", 60).glyph("H")

        canvas.stamp_glyph(glyph, 50, 120, angle=10, scale=1.1, opacity=0.3)

        darkest = min(sum(c) for _, c in canvas.image.getcolors(200 * 200))
        assert 0 < darkest < 3 * 255

    def test_stamp_when_off_page_then_clipped(self, fonts):
        canvas = PageCanvas(50, 50, "#ffffff", (0, 0, 0))
        canvas.stamp_glyph(fonts.atlas("Caveat", 60).glyph("H"), -20, 10)

    def test_scribble_when_points_then_draws_line(self):
        canvas = PageCanvas(300, 100, "#ffffff", (200, 0, 0))
        points = strike_through_points(random.Random(1), 20.0, 280.0, 50.0, scale=1.0)

        canvas.scribble(points, width=3, opacity=1.0)

        assert any(canvas.image.getpixel((150, y))[1] < 255 for y in range(30, 70))
