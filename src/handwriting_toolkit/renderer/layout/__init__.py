"""
Module: renderer.layout

Purpose:
    Page layout and rasterization for handwritten pages.
    Converts the front of a text into one rendered page plus remainder.

Key Functions:
    - render_page(): Layout engine entry point

Key Classes:
    - PageGeometry: Output raster geometry
    - FontProvider: Font resolution and glyph caching
    - LayoutOutcome: One page plus its unconsumed remainder
    - Page: Rendered raster with its document index

Dependencies:
    - PIL: Rasterization and font metrics

Used By:
    - renderer.paginator: Pagination driver
"""

from .config import PageGeometry
from .fonts import FontLoadError, FontProvider, GlyphAtlas
from .models import Cursor, LayoutOutcome, Page, PlacedWord, Token
from .engine import render_page

__all__ = [
    # Config
    "PageGeometry",
    # Fonts
    "FontLoadError",
    "FontProvider",
    "GlyphAtlas",
    # Models
    "Cursor",
    "LayoutOutcome",
    "Page",
    "PlacedWord",
    "Token",
    # Functions
    "render_page",
]
