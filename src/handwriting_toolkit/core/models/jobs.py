"""
Module: core.models.jobs

Purpose:
    Job entity and the read-only views handed back to callers.
    A Job is mutated only through its JobStateMachine, by the one
    worker currently executing it.

Key Classes:
    - JobStatus: Lifecycle states
    - Job: One asynchronous generation request
    - ArtifactReference: Where a finished PDF lives
    - JobStatusView: Status query result

Dependencies:
    - dataclasses (std)
    - datetime (std)

Used By:
    - pipeline.state: JobStateMachine
    - pipeline.service: Submission and status queries
    - core.utils.serialization: Persisted job records
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .settings import Settings


class JobStatus(str, Enum):
    """Job lifecycle states."""
    QUEUED = "queued"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for states no transition may leave."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class ArtifactReference:
    """
    Retrievable reference to a finished artifact.

    Attributes:
        location: URL (remote) or filesystem path (local)
        is_remote: True when consumers should be redirected to `location`
        store: Name of the store that accepted the write
    """
    location: str
    is_remote: bool = False
    store: str = "local"


@dataclass
class Job:
    """
    One generation request.

    Attributes:
        id: Job identifier (uuid4 string)
        text_ref: Reference into the text store
        settings: Immutable settings snapshot
        status: Current lifecycle state
        progress: Percentage 0-100, non-decreasing while active
        created_at: Submission time
        started_at: Time a worker accepted the job
        completed_at: Time a terminal state was reached
        result_ref: Artifact reference, set only on completion
        page_count: Pages rendered
        truncated: True when the page ceiling cut the text short
        warnings: Degraded-page and truncation notes
        error_kind: Failure category, set only on failure
        error_message: Generic caller-facing failure message
    """
    id: str
    text_ref: str
    settings: Settings
    status: JobStatus = JobStatus.QUEUED
    progress: float = 0.0
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    result_ref: Optional[ArtifactReference] = None
    page_count: int = 0
    truncated: bool = False
    warnings: List[str] = field(default_factory=list)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class JobStatusView:
    """
    Status query result (immutable).

    Attributes:
        job_id: Job identifier
        state: Current lifecycle state
        progress: Integer percentage 0-100
        result_ref: Present only when state is completed
        error: Generic failure message, present only when failed
        truncated: Completed with text left over at the page ceiling
        page_count: Pages rendered so far
    """
    job_id: str
    state: JobStatus
    progress: int
    result_ref: Optional[ArtifactReference] = None
    error: Optional[str] = None
    truncated: bool = False
    page_count: int = 0

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusView":
        """Build a view from a job, hiding fields that do not apply."""
        return cls(
            job_id=job.id,
            state=job.status,
            progress=int(job.progress),
            result_ref=job.result_ref if job.status == JobStatus.COMPLETED else None,
            error=job.error_message if job.status == JobStatus.FAILED else None,
            truncated=job.truncated,
            page_count=job.page_count,
        )
