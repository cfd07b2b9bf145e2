"""
Module: renderer.layout.config

Purpose:
    Output raster geometry for the layout engine.
    Settings are expressed in design units; the geometry fixes the
    raster size and the single scale factor between the two.

Key Classes:
    - PageGeometry: Immutable raster geometry

Dependencies:
    - dataclasses (std)

Used By:
    - renderer.layout.engine: Scales settings to pixels
    - renderer.output.assembler: Page size in PDF points
    - pipeline.config: Built from ServiceConfig
"""

from __future__ import annotations

from dataclasses import dataclass

from handwriting_toolkit.core.models.settings import DESIGN_WIDTH

# A4 at 150 DPI. 300 DPI pages are ~26MB each as RGB rasters.
DEFAULT_PAGE_WIDTH_PX = 1240
DEFAULT_PAGE_HEIGHT_PX = 1754
DEFAULT_DPI = 150


@dataclass(frozen=True)
class PageGeometry:
    """
    Raster geometry for one rendered page (immutable).

    Attributes:
        width: Raster width in pixels
        height: Raster height in pixels
        dpi: Dots per inch, used to size PDF pages

    Example:
        >>> geometry = PageGeometry()
        >>> round(geometry.scale, 3)
        2.084
    """

    width: int = DEFAULT_PAGE_WIDTH_PX
    height: int = DEFAULT_PAGE_HEIGHT_PX
    dpi: int = DEFAULT_DPI

    def __post_init__(self) -> None:
        """Validate geometry on construction."""
        if self.width <= 0:
            raise ValueError(f"width must be positive: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be positive: {self.height}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")

    @property
    def scale(self) -> float:
        """Design-unit to pixel scale factor."""
        return self.width / DESIGN_WIDTH

    @property
    def raster_bytes(self) -> int:
        """Memory held by one RGB raster of this size."""
        return self.width * self.height * 3

    @property
    def page_size_pt(self) -> tuple[float, float]:
        """PDF page size in points (1/72 inch)."""
        return (self.width * 72.0 / self.dpi, self.height * 72.0 / self.dpi)
