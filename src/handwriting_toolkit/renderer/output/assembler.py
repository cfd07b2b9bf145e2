"""
Module: renderer.output.assembler

Purpose:
    Accumulate rendered page rasters into one multi-page PDF using
    ReportLab. Each Page becomes one PDF page with the raster drawn
    full-bleed.

Key Classes:
    - DocumentAssembler: Append-only page sink with a single finalize
    - AssemblerClosedError: Use after finalize

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - renderer.layout: Page, PageGeometry

Used By:
    - pipeline.processor: One assembler per job
    - cli: Direct rendering
"""

from __future__ import annotations

import io
import logging

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from handwriting_toolkit.renderer.layout import Page, PageGeometry

logger = logging.getLogger(__name__)

PDF_TITLE = "Handwritten document"


class AssemblerClosedError(Exception):
    """Raised when pages are added to, or finalize is repeated on, a finished document."""
    pass


class DocumentAssembler:
    """
    Append-only multi-page PDF builder.

    Pages must arrive with consecutive indices starting at 0. Nothing is
    durably written until `finalize()`, which returns the PDF bytes and
    closes the document.

    Usage:
        assembler = DocumentAssembler(geometry)
        for page in pages:
            assembler.add_page(page)
        pdf_bytes = assembler.finalize()

    Attributes:
        geometry: Raster geometry, fixes the PDF page size
    """

    def __init__(self, geometry: PageGeometry | None = None, *, title: str = PDF_TITLE):
        self.geometry = geometry or PageGeometry()
        self._buffer = io.BytesIO()
        self._page_size = self.geometry.page_size_pt
        # invariant=1 keeps output byte-stable for identical input
        self._canvas = canvas.Canvas(self._buffer, pagesize=self._page_size, invariant=1)
        self._canvas.setTitle(title)
        self._page_count = 0
        self._finalized = False

    @property
    def page_count(self) -> int:
        """Pages added so far."""
        return self._page_count

    @property
    def is_finalized(self) -> bool:
        """True once finalize() has run."""
        return self._finalized

    def add_page(self, page: Page) -> None:
        """
        Embed one page.

        Args:
            page: Rendered page; its index must equal page_count

        Raises:
            AssemblerClosedError: If the document was finalized
            ValueError: If the page arrives out of order
        """
        if self._finalized:
            raise AssemblerClosedError("Document already finalized")
        if page.index != self._page_count:
            raise ValueError(f"Expected page {self._page_count}, got page {page.index}")

        width_pt, height_pt = self._page_size
        self._canvas.drawImage(
            _pil_to_reader(page.image),
            0,
            0,
            width=width_pt,
            height=height_pt,
        )
        self._canvas.showPage()
        self._page_count += 1
        logger.debug(f"Embedded page {page.index}")

    def finalize(self) -> bytes:
        """
        Close the document and return the PDF bytes.

        Returns:
            Complete PDF

        Raises:
            AssemblerClosedError: If called twice
        """
        if self._finalized:
            raise AssemblerClosedError("Document already finalized")
        if self._page_count == 0:
            logger.warning("Finalizing document with no pages")
        self._canvas.save()
        self._finalized = True
        data = self._buffer.getvalue()
        logger.info(f"Assembled {self._page_count} pages ({len(data)} bytes)")
        return data


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)
