"""
Module: pipeline.processor

Purpose:
    Execute one job end to end: read its text, paginate it into a
    document assembler, finalize the PDF and persist it. Runs on a
    worker thread; all failures surface as GenerationError subclasses.

Key Classes:
    - JobOutcome: What a finished job produced

Key Functions:
    - run_job(): Job execution

Dependencies:
    - renderer: paginate, DocumentAssembler, FontProvider
    - pipeline.artifacts / pipeline.text_store: I/O

Used By:
    - pipeline.service: Worker-pool runner
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from handwriting_toolkit.core.models.jobs import ArtifactReference, Job
from handwriting_toolkit.renderer import (
    DocumentAssembler,
    FontLoadError,
    FontProvider,
    RenderTimings,
    paginate,
)
from handwriting_toolkit.renderer.timing import timed_phase

from .artifacts import ArtifactStore
from .config import ServiceConfig
from .errors import RenderFailure, SourceNotFound, StorageFailure
from .text_store import TextStore

logger = logging.getLogger(__name__)


@dataclass
class JobOutcome:
    """
    Result of a successful run.

    Attributes:
        result_ref: Where the PDF was stored
        page_count: Pages in the document
        truncated: Page ceiling reached with text left over
        warnings: Degraded-page and truncation notes
        timings: Page and job phase durations
    """
    result_ref: ArtifactReference
    page_count: int
    truncated: bool = False
    warnings: List[str] = field(default_factory=list)
    timings: RenderTimings = field(default_factory=RenderTimings)


def run_job(
    job: Job,
    report_progress: Callable[[float], None],
    *,
    text_store: TextStore,
    artifact_store: ArtifactStore,
    config: ServiceConfig,
    fonts: Optional[FontProvider] = None,
) -> JobOutcome:
    """
    Render `job` to a PDF and store it.

    Nothing is written to the artifact store unless every page rendered
    and the document finalized.

    Args:
        job: The active job (settings already snapshotted, seed filled)
        report_progress: Receives 0-100 after each page
        text_store: Source of the job's text
        artifact_store: Destination for the finished PDF
        config: Page geometry and limits
        fonts: Font provider (shared between jobs)

    Returns:
        JobOutcome

    Raises:
        SourceNotFound: Text missing, expired or empty
        RenderFailure: Font or raster fault
        StorageFailure: Artifact could not be written
    """
    text = text_store.read(job.text_ref)
    if not text:
        raise SourceNotFound(f"Text {job.text_ref} is missing or empty")

    geometry = config.geometry
    assembler = DocumentAssembler(geometry)
    rng = random.Random(job.settings.seed)
    logger.info(
        f"[{job.id}] Rendering {len(text)} characters "
        f"({job.settings.font_family} {job.settings.font_size}, seed {job.settings.seed})"
    )

    try:
        result = paginate(
            text,
            job.settings,
            geometry=geometry,
            rng=rng,
            fonts=fonts,
            max_pages=config.max_pages,
            chunk_size=config.forced_chunk_size,
            on_page=assembler.add_page,
            on_progress=report_progress,
        )
        with timed_phase(result.timings, "finalize"):
            data = assembler.finalize()
    except FontLoadError as e:
        raise RenderFailure(f"Font unavailable: {e}") from e
    except (OSError, ValueError, MemoryError) as e:
        raise RenderFailure(f"Rendering failed: {e}") from e

    try:
        with timed_phase(result.timings, "store"):
            ref = artifact_store.write(data, job.id)
    except StorageFailure:
        raise
    except (OSError, ValueError) as e:
        raise StorageFailure(f"Artifact write failed: {e}") from e

    logger.debug(f"[{job.id}]{result.timings.summary()}")
    return JobOutcome(
        result_ref=ref,
        page_count=result.page_count,
        truncated=result.truncated,
        warnings=list(result.warnings),
        timings=result.timings,
    )
