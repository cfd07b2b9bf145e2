"""
Module: renderer

Purpose:
    Handwriting rendering pipeline for a single document.
    Lays out pages with jitter and simulated mistakes, paginates
    arbitrarily long text and assembles the pages into one PDF.

Key Functions:
    - render_page(): Layout engine, one page plus remainder
    - paginate(): Pagination driver

Key Classes:
    - PageGeometry: Output raster geometry
    - DocumentAssembler: Multi-page PDF builder
    - PaginationResult: Pagination outcome

Dependencies:
    - PIL: Rasterization
    - reportlab: PDF container

Used By:
    - pipeline.processor: Job execution
"""

from .layout import FontLoadError, FontProvider, LayoutOutcome, Page, PageGeometry, render_page
from .paginator import PageSegment, PaginationResult, compute_progress, paginate
from .output import AssemblerClosedError, DocumentAssembler
from .timing import RenderTimings

__all__ = [
    "FontLoadError",
    "FontProvider",
    "LayoutOutcome",
    "Page",
    "PageGeometry",
    "render_page",
    "PageSegment",
    "PaginationResult",
    "compute_progress",
    "paginate",
    "AssemblerClosedError",
    "DocumentAssembler",
    "RenderTimings",
]
