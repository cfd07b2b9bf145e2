"""
Module: renderer.timing

Purpose:
    Timing instrumentation for the pagination loop, to see where a
    long render spends its time.

Key Classes:
    - RenderTimings: Collects job-level and per-page durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - renderer.paginator: Times each page render and hand-off
    - pipeline.processor: Times finalize and storage phases
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class RenderTimings:
    """
    Timing metrics for one job.

    Attributes:
        job_timings: Dict of phase_name -> duration_seconds
        page_timings: Dict of page_index -> {phase_name -> duration_seconds}

    Example:
        >>> timings = RenderTimings()
        >>> timings.log_page(0, "layout", 0.412)
        >>> timings.log_job("finalize", 0.051)
        >>> print(timings.summary())
    """
    job_timings: Dict[str, float] = field(default_factory=dict)
    page_timings: Dict[int, Dict[str, float]] = field(default_factory=dict)

    def log_job(self, phase: str, duration: float) -> None:
        """Log a job-level timing metric."""
        self.job_timings[phase] = duration

    def log_page(self, page_index: int, phase: str, duration: float) -> None:
        """Log a page-level timing metric."""
        self.page_timings.setdefault(page_index, {})[phase] = duration

    def get_page_total(self, page_index: int) -> float:
        """Get total time for a page."""
        return sum(self.page_timings.get(page_index, {}).values())

    def get_phase_averages(self) -> Dict[str, float]:
        """Calculate average time per phase across all pages."""
        totals: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        for phases in self.page_timings.values():
            for phase, duration in phases.items():
                totals[phase] = totals.get(phase, 0.0) + duration
                counts[phase] = counts.get(phase, 0) + 1
        return {phase: totals[phase] / counts[phase] for phase in totals}

    def get_slowest_pages(self, n: int = 3) -> List[Tuple[int, float]]:
        """Get the N slowest pages as (page_index, total_seconds)."""
        totals = [(index, sum(phases.values())) for index, phases in self.page_timings.items()]
        totals.sort(key=lambda x: x[1], reverse=True)
        return totals[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Render Timing Summary ==="]

        if self.job_timings:
            lines.append("Job-level:")
            for phase, duration in sorted(self.job_timings.items()):
                lines.append(f"  {phase:25s} {duration:.3f}s")

        averages = self.get_phase_averages()
        if averages:
            lines.append("")
            lines.append(f"Page-level averages ({len(self.page_timings)} pages):")
            for phase, avg in sorted(averages.items(), key=lambda x: -x[1]):
                lines.append(f"  {phase:25s} {avg:.3f}s")

        slowest = self.get_slowest_pages(3)
        if slowest:
            lines.append("")
            lines.append("Slowest pages:")
            for index, total in slowest:
                lines.append(f"  page {index}: {total:.3f}s")

        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Export timing data as dictionary."""
        return {
            "job_timings": self.job_timings,
            "page_timings": {str(k): v for k, v in self.page_timings.items()},
            "phase_averages": self.get_phase_averages(),
            "slowest_pages": [
                {"page": index, "total": total}
                for index, total in self.get_slowest_pages(5)
            ],
        }


@contextmanager
def timed_phase(
    log: RenderTimings,
    phase: str,
    page_index: Optional[int] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase.

    Args:
        log: RenderTimings instance to record metrics
        phase: Name of the phase being timed
        page_index: If provided, records as page-level metric;
                    otherwise records as job-level metric

    Example:
        >>> timings = RenderTimings()
        >>> with timed_phase(timings, "layout", page_index=0):
        ...     outcome = render_page(text, settings, rng)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if page_index is not None:
            log.log_page(page_index, phase, elapsed)
        else:
            log.log_job(phase, elapsed)
