"""
Module: pipeline.config

Purpose:
    Configuration dataclass for the generation service. Immutable
    configuration with validation on construction.

Key Classes:
    - ServiceConfig: Directories, pool size, page limits and expiry

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - pipeline.service: GenerationService
    - pipeline.processor: Page geometry and limits
    - cli: Built from command-line flags
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from handwriting_toolkit.renderer.layout import PageGeometry


@dataclass(frozen=True)
class ServiceConfig:
    """
    Configuration for the generation service (immutable).

    Attributes:
        data_dir: Root for persisted texts and job records
        output_dir: Where finished PDFs are written (default data_dir/output)
        fallback_output_dir: Secondary artifact directory, tried once when
            the primary write fails (default data_dir/output-fallback)
        fonts_dir: Directory holding the handwriting TTF files
        public_base_url: If set, artifacts are referenced by URL under it
        max_workers: Concurrent jobs; each holds one page raster
        max_pages: Page ceiling per job
        forced_chunk_size: Characters dropped after a no-progress page
        page_width_px: Raster width (A4 at 150 DPI)
        page_height_px: Raster height
        dpi: Raster resolution, fixes the PDF page size
        expiry_seconds: Age after which texts, records and artifacts expire
        cleanup_interval_seconds: Period of the cleanup sweep
        persist_jobs: Write job records to disk (False keeps them in memory)

    Example:
        >>> config = ServiceConfig(data_dir=Path("/var/lib/handwriting"))
        >>> config.geometry.raster_bytes
        6524880
    """

    data_dir: Path
    output_dir: Optional[Path] = None
    fallback_output_dir: Optional[Path] = None
    fonts_dir: Optional[Path] = None
    public_base_url: Optional[str] = None

    # Execution
    max_workers: int = 1
    max_pages: int = 500
    forced_chunk_size: int = 100

    # Layout
    page_width_px: int = 1240  # A4 width at 150 DPI
    page_height_px: int = 1754  # A4 height at 150 DPI
    dpi: int = 150

    # Expiry
    expiry_seconds: float = 30 * 60
    cleanup_interval_seconds: float = 5 * 60

    persist_jobs: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        if self.output_dir is not None:
            object.__setattr__(self, "output_dir", Path(self.output_dir))
        if self.fallback_output_dir is not None:
            object.__setattr__(self, "fallback_output_dir", Path(self.fallback_output_dir))
        if self.fonts_dir is not None:
            object.__setattr__(self, "fonts_dir", Path(self.fonts_dir))

        if self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive: {self.max_workers}")
        if self.max_pages <= 0:
            raise ValueError(f"max_pages must be positive: {self.max_pages}")
        if self.forced_chunk_size <= 0:
            raise ValueError(f"forced_chunk_size must be positive: {self.forced_chunk_size}")
        if self.expiry_seconds <= 0:
            raise ValueError(f"expiry_seconds must be positive: {self.expiry_seconds}")
        if self.cleanup_interval_seconds <= 0:
            raise ValueError(
                f"cleanup_interval_seconds must be positive: {self.cleanup_interval_seconds}"
            )
        if self.public_base_url is not None and not self.public_base_url.startswith(("http://", "https://")):
            raise ValueError(f"public_base_url must be an http(s) URL: {self.public_base_url!r}")
        PageGeometry(width=self.page_width_px, height=self.page_height_px, dpi=self.dpi)

    @property
    def geometry(self) -> PageGeometry:
        return PageGeometry(width=self.page_width_px, height=self.page_height_px, dpi=self.dpi)

    @property
    def resolved_output_dir(self) -> Path:
        return self.output_dir if self.output_dir is not None else self.data_dir / "output"

    @property
    def resolved_fallback_output_dir(self) -> Path:
        if self.fallback_output_dir is not None:
            return self.fallback_output_dir
        return self.data_dir / "output-fallback"

    @property
    def texts_dir(self) -> Path:
        return self.data_dir / "texts"

    @property
    def jobs_dir(self) -> Path:
        return self.data_dir / "jobs"
