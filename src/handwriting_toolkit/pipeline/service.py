"""
Module: pipeline.service

Purpose:
    Facade over the whole generation pipeline: text hand-off, job
    submission, status queries, result retrieval and periodic cleanup.
    Submission validates synchronously and returns immediately; the
    work happens on the worker pool.

Key Classes:
    - GenerationService: Public entry point
    - ResultHandle: Redirect URL or byte stream for a finished job
    - ResultNotReadyError: Result requested before completion

Dependencies:
    - pipeline.worker_pool: Job execution
    - pipeline.stores / text_store / artifacts: Persistence
    - pipeline.cleanup: Expiry

Used By:
    - cli: Direct rendering
    - Any outer surface (HTTP handlers, GUIs)
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Any, BinaryIO, Dict, Mapping, Optional, Union

from handwriting_toolkit.core.models.jobs import ArtifactReference, Job, JobStatus, JobStatusView
from handwriting_toolkit.core.models.settings import MAX_SEED, Settings
from handwriting_toolkit.core.schemas.validator import ValidationError, validate_settings
from handwriting_toolkit.core.utils.serialization import job_from_record, job_to_record
from handwriting_toolkit.renderer import FontProvider

from .artifacts import ArtifactStore, FallbackArtifactStore, LocalArtifactStore
from .cleanup import CleanupScheduler
from .config import ServiceConfig
from .processor import run_job
from .state import JobStateMachine
from .stores import JsonFileStore, KeyValueStore, MemoryStore
from .text_store import TextStore
from .worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class ResultNotReadyError(Exception):
    """Raised when a result is requested for a job that has not completed."""
    pass


@dataclass
class ResultHandle:
    """
    How to retrieve a finished document.

    Exactly one of `redirect_url` and `stream` is set. The caller owns
    (and must close) the stream.

    Attributes:
        job_id: Job identifier
        reference: Stored artifact reference
        redirect_url: URL to redirect the consumer to (remote artifacts)
        stream: Open binary stream (local artifacts)
    """
    job_id: str
    reference: ArtifactReference
    redirect_url: Optional[str] = None
    stream: Optional[BinaryIO] = None

    def read(self) -> bytes:
        """Read and close the stream. Remote results have no local bytes."""
        if self.stream is None:
            raise ValueError(f"Result for job {self.job_id} is remote: {self.redirect_url}")
        with self.stream as f:
            return f.read()


class GenerationService:
    """
    Asynchronous handwritten-document generation.

    Usage:
        with GenerationService(ServiceConfig(data_dir=Path("data"))) as service:
            ref = service.save_text(text)
            job_id = service.submit_job(ref, {"fontFamily": "Kalam"})
            service.wait(job_id)
            pdf = service.fetch_result(job_id).read()

    Collaborators can be injected (tests, alternative stores); by default
    texts and job records live under `config.data_dir` and artifacts
    under `config.resolved_output_dir`, falling back once to
    `config.resolved_fallback_output_dir` when a write there fails.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        text_store: Optional[TextStore] = None,
        job_store: Optional[KeyValueStore] = None,
        artifact_store: Optional[ArtifactStore] = None,
        fonts: Optional[FontProvider] = None,
    ):
        self.config = config
        self.texts = text_store or TextStore(JsonFileStore(config.texts_dir))
        if job_store is not None:
            self.jobs = job_store
        elif config.persist_jobs:
            self.jobs = JsonFileStore(config.jobs_dir)
        else:
            self.jobs = MemoryStore()
        self.artifacts = artifact_store or _default_artifact_store(config)
        self.fonts = fonts or FontProvider(config.fonts_dir)

        runner = partial(
            run_job,
            text_store=self.texts,
            artifact_store=self.artifacts,
            config=config,
            fonts=self.fonts,
        )
        self._pool = WorkerPool(runner, max_workers=config.max_workers)
        self._cleanup = CleanupScheduler(self.sweep_expired, interval=config.cleanup_interval_seconds)
        self._machines: Dict[str, JobStateMachine] = {}
        self._lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Start the cleanup scheduler. Workers start on first submission."""
        self._cleanup.start()

    def close(self) -> None:
        """Finish queued jobs, then stop workers and the scheduler."""
        self._cleanup.stop()
        self._pool.shutdown()

    def __enter__(self) -> "GenerationService":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ─────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────

    def save_text(self, text: str) -> str:
        """Store extracted text; returns the reference for submit_job()."""
        return self.texts.save(text)

    def submit_job(self, text_ref: str, settings: Union[Settings, Mapping[str, Any]]) -> str:
        """
        Validate and enqueue a generation job.

        The settings are snapshotted: later changes to the caller's
        mapping never reach the job. A seed is drawn when none is given.

        Args:
            text_ref: Reference returned by save_text()
            settings: Settings, or a camelCase/snake_case mapping

        Returns:
            New job id

        Raises:
            ValidationError: Invalid settings or no text reference
        """
        if not text_ref or not isinstance(text_ref, str):
            raise ValidationError("A text reference is required", path="text_ref")
        snapshot = settings if isinstance(settings, Settings) else validate_settings(settings)
        if snapshot.seed is None:
            snapshot = snapshot.with_seed(secrets.randbelow(MAX_SEED))

        job = Job(id=str(uuid.uuid4()), text_ref=text_ref, settings=snapshot)
        machine = JobStateMachine(job, on_change=self._persist)
        with self._lock:
            self._machines[job.id] = machine
        self._persist(job)

        self._pool.submit(machine)
        logger.info(f"[{job.id}] submitted (text {text_ref})")
        return job.id

    def query_status(self, job_id: str) -> JobStatusView:
        """
        Current state of a job.

        Raises:
            KeyError: Unknown or expired job id
        """
        with self._lock:
            machine = self._machines.get(job_id)
        if machine is not None:
            return machine.snapshot()
        return JobStatusView.from_job(self._load_record(job_id))

    def fetch_result(self, job_id: str) -> ResultHandle:
        """
        Retrieve a completed job's document.

        Raises:
            KeyError: Unknown or expired job id
            ResultNotReadyError: Job is not completed
            FileNotFoundError: Artifact already swept
        """
        view = self.query_status(job_id)
        if view.state != JobStatus.COMPLETED or view.result_ref is None:
            raise ResultNotReadyError(f"Job {job_id} is {view.state.value}")
        ref = view.result_ref
        if ref.is_remote:
            return ResultHandle(job_id=job_id, reference=ref, redirect_url=ref.location)
        return ResultHandle(job_id=job_id, reference=ref, stream=self.artifacts.open(ref))

    def wait(self, job_id: str, timeout: Optional[float] = None) -> JobStatusView:
        """Block until the job is terminal or `timeout` elapses; returns its status."""
        with self._lock:
            machine = self._machines.get(job_id)
        if machine is not None:
            machine.wait(timeout)
        return self.query_status(job_id)

    def sweep_expired(self) -> int:
        """
        Remove texts, finished job records and artifacts older than the
        configured expiry. Returns the number of items removed.
        """
        cutoff = time.time() - self.config.expiry_seconds
        removed = self.texts.sweep(cutoff)
        removed += self.artifacts.sweep(cutoff)

        for key in self.jobs.keys():
            stamp = self.jobs.updated_at(key)
            record = self.jobs.get(key)
            if stamp is None or stamp >= cutoff or record is None:
                continue
            if JobStatus(record.get("status", "queued")).is_terminal and self.jobs.delete(key):
                removed += 1

        with self._lock:
            for job_id, machine in list(self._machines.items()):
                finished = machine.job.completed_at
                if machine.status.is_terminal and finished and finished.timestamp() < cutoff:
                    del self._machines[job_id]
        return removed

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _persist(self, job: Job) -> None:
        self.jobs.put(job.id, job_to_record(job))

    def _load_record(self, job_id: str) -> Job:
        try:
            record = self.jobs.get(job_id)
        except ValueError:
            record = None
        if record is None:
            raise KeyError(job_id)
        return job_from_record(record)


def _default_artifact_store(config: ServiceConfig) -> ArtifactStore:
    return FallbackArtifactStore(
        LocalArtifactStore(config.resolved_output_dir, config.public_base_url),
        LocalArtifactStore(config.resolved_fallback_output_dir, name="local-fallback"),
    )
