"""
Module: pipeline.worker_pool

Purpose:
    Bounded pool of worker threads executing queued jobs in FIFO order.
    Each worker drives its job's state machine from activation to a
    terminal state; a job failing never affects any other job.

Key Classes:
    - WorkerPool: Thread pool-based job queue

Dependencies:
    - concurrent.futures: Thread pool execution

Used By:
    - pipeline.service: Job dispatch

Memory:
    A worker holds one page raster at a time (width x height x 3 bytes,
    about 6.5 MB at 1240x1754) plus the PDF being assembled, so peak
    raster memory is max_workers rasters regardless of document length.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from handwriting_toolkit.core.models.jobs import Job

from .errors import RENDER_FAILURE, GenerationError
from .processor import JobOutcome
from .state import JobStateMachine

logger = logging.getLogger(__name__)

JobRunner = Callable[[Job, Callable[[float], None]], JobOutcome]


class WorkerPool:
    """
    FIFO job queue over a thread pool.

    Usage:
        pool = WorkerPool(runner, max_workers=1)
        try:
            pool.submit(machine)
            pool.wait_all()
        finally:
            pool.shutdown()

    Attributes:
        max_workers: Maximum jobs executing concurrently
    """

    def __init__(self, runner: JobRunner, max_workers: int = 1):
        """
        Initialize the pool.

        Args:
            runner: Called as runner(job, report_progress) on a worker thread
            max_workers: Concurrent jobs. Default 1 keeps one raster live.
        """
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive: {max_workers}")
        self.max_workers = max_workers
        self._runner = runner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="handwriting-worker",
        )
        self._futures: List[Future] = []
        self._futures_lock = threading.Lock()
        self._closed = False

    def submit(self, machine: JobStateMachine) -> Future:
        """
        Queue a job for execution.

        Raises:
            RuntimeError: If the pool has been shut down
        """
        if self._closed:
            raise RuntimeError("WorkerPool is shut down")
        future = self._executor.submit(self._execute, machine)
        with self._futures_lock:
            self._futures.append(future)
        future.add_done_callback(self._forget)
        logger.debug(f"[{machine.job_id}] queued")
        return future

    def _forget(self, future: Future) -> None:
        with self._futures_lock:
            if future in self._futures:
                self._futures.remove(future)

    @property
    def pending(self) -> int:
        """Jobs queued or running."""
        with self._futures_lock:
            return len(self._futures)

    def _execute(self, machine: JobStateMachine) -> None:
        machine.activate()
        try:
            outcome = self._runner(machine.job, machine.report_progress)
        except GenerationError as e:
            logger.warning(f"[{machine.job_id}] {type(e).__name__}: {e}")
            machine.fail(e.kind, detail=str(e))
            return
        except Exception:
            logger.exception(f"[{machine.job_id}] Unexpected failure")
            machine.fail(RENDER_FAILURE, detail="unexpected error")
            return

        machine.complete(
            outcome.result_ref,
            page_count=outcome.page_count,
            truncated=outcome.truncated,
            warnings=outcome.warnings,
        )

    def wait_all(self, timeout: Optional[float] = None) -> int:
        """
        Wait for jobs still queued or running to reach a terminal state.

        Args:
            timeout: Max seconds to wait per job (None = indefinite).

        Returns:
            Number of waited-on jobs that finished.
        """
        completed = 0
        with self._futures_lock:
            futures = list(self._futures)
        for future in futures:
            try:
                future.result(timeout=timeout)
                completed += 1
            except Exception as e:
                logger.error(f"Worker failed: {e}")
        return completed

    def shutdown(self) -> None:
        """Finish queued jobs and stop the pool."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        logger.debug("Worker pool stopped")

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()
