"""
Module: pipeline.state

Purpose:
    Single-owner lifecycle tracking for one job.

    queued -> active -> completed | failed

    Terminal states are final. Progress is accepted only while active
    and never decreases.

Key Classes:
    - JobStateMachine: Guards every mutation of a Job

Dependencies:
    - threading (std): Readers poll while the worker writes

Used By:
    - pipeline.worker_pool: Drives activate/complete/fail
    - pipeline.service: Status snapshots
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, Optional

from handwriting_toolkit.core.models.jobs import ArtifactReference, Job, JobStatus, JobStatusView

from .errors import PUBLIC_MESSAGES, RENDER_FAILURE, InvalidTransitionError

logger = logging.getLogger(__name__)


class JobStateMachine:
    """
    Owner of one Job's state.

    Attributes:
        job: The job being tracked (mutate only through this class)

    Example:
        >>> machine = JobStateMachine(job)
        >>> machine.activate()
        >>> machine.report_progress(40)
        >>> machine.complete(ref, page_count=3)
        >>> machine.snapshot().state
        <JobStatus.COMPLETED: 'completed'>
    """

    def __init__(self, job: Job, on_change: Optional[Callable[[Job], None]] = None):
        self.job = job
        self._on_change = on_change
        self._lock = threading.RLock()
        self._finished = threading.Event()
        if job.status.is_terminal:
            self._finished.set()

    @property
    def job_id(self) -> str:
        return self.job.id

    @property
    def status(self) -> JobStatus:
        return self.job.status

    def activate(self) -> None:
        """
        Move queued -> active. Happens once, when a worker accepts the job.

        Raises:
            InvalidTransitionError: If the job is not queued
        """
        with self._lock:
            self._require(JobStatus.QUEUED, "activate")
            self.job.status = JobStatus.ACTIVE
            self.job.started_at = datetime.now()
            logger.info(f"[{self.job.id}] active")
            self._changed()

    def report_progress(self, value: float) -> None:
        """
        Record progress while active.

        Values are clamped to [0, 100]; a value lower than the current
        progress is ignored so progress never decreases. Reports outside
        the active state are dropped.
        """
        with self._lock:
            if self.job.status != JobStatus.ACTIVE:
                logger.debug(f"[{self.job.id}] progress {value} ignored in state {self.job.status.value}")
                return
            clamped = max(0.0, min(100.0, float(value)))
            if clamped <= self.job.progress:
                return
            self.job.progress = clamped
            self._changed()

    def complete(
        self,
        result_ref: ArtifactReference,
        *,
        page_count: int,
        truncated: bool = False,
        warnings: Iterable[str] = (),
    ) -> None:
        """
        Move active -> completed.

        Args:
            result_ref: Where the finished artifact lives
            page_count: Pages rendered
            truncated: Text was left over at the page ceiling
            warnings: Degraded-page and truncation notes

        Raises:
            InvalidTransitionError: If the job is not active
        """
        with self._lock:
            self._require(JobStatus.ACTIVE, "complete")
            self.job.status = JobStatus.COMPLETED
            self.job.completed_at = datetime.now()
            self.job.result_ref = result_ref
            self.job.page_count = page_count
            self.job.truncated = truncated
            self.job.warnings.extend(warnings)
            logger.info(
                f"[{self.job.id}] completed: {page_count} pages"
                + (" (truncated)" if truncated else "")
            )
            self._changed()
            self._finished.set()

    def fail(self, kind: str = RENDER_FAILURE, detail: Optional[str] = None) -> None:
        """
        Move queued|active -> failed with the generic message for `kind`.

        `detail` goes to the log only; callers see the generic message.

        Raises:
            InvalidTransitionError: If the job is already terminal
        """
        with self._lock:
            if self.job.status.is_terminal:
                raise InvalidTransitionError(
                    f"Cannot fail job {self.job.id} in state {self.job.status.value}"
                )
            self.job.status = JobStatus.FAILED
            self.job.completed_at = datetime.now()
            self.job.error_kind = kind
            self.job.error_message = PUBLIC_MESSAGES.get(kind, PUBLIC_MESSAGES[RENDER_FAILURE])
            logger.info(f"[{self.job.id}] failed: {kind}" + (f" ({detail})" if detail else ""))
            self._changed()
            self._finished.set()

    def snapshot(self) -> JobStatusView:
        """Consistent read-only view of the job."""
        with self._lock:
            return JobStatusView.from_job(self.job)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a terminal state is reached; False on timeout."""
        return self._finished.wait(timeout)

    def _require(self, expected: JobStatus, action: str) -> None:
        if self.job.status != expected:
            raise InvalidTransitionError(
                f"Cannot {action} job {self.job.id} in state {self.job.status.value}"
            )

    def _changed(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.job)
        except OSError as e:
            logger.error(f"[{self.job.id}] Failed to persist job record: {e}")
