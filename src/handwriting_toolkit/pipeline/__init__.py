"""
Module: pipeline

Purpose:
    Asynchronous job pipeline around the renderer: validated submission,
    FIFO worker pool, per-job state machine, text and artifact stores,
    and periodic cleanup.

Key Classes:
    - GenerationService: Facade used by callers
    - ServiceConfig: Service configuration
    - JobStateMachine: Job lifecycle
    - WorkerPool: Job execution

Used By:
    - cli
"""

from .artifacts import ArtifactStore, FallbackArtifactStore, LocalArtifactStore
from .cleanup import CleanupScheduler
from .config import ServiceConfig
from .errors import (
    PUBLIC_MESSAGES,
    RENDER_FAILURE,
    SOURCE_NOT_FOUND,
    STORAGE_FAILURE,
    GenerationError,
    InvalidTransitionError,
    RenderFailure,
    SourceNotFound,
    StorageFailure,
)
from .processor import JobOutcome, run_job
from .service import GenerationService, ResultHandle, ResultNotReadyError
from .state import JobStateMachine
from .stores import JsonFileStore, KeyValueStore, MemoryStore
from .text_store import TextStore
from .worker_pool import WorkerPool

__all__ = [
    # Service
    "GenerationService",
    "ResultHandle",
    "ResultNotReadyError",
    "ServiceConfig",
    # Execution
    "JobOutcome",
    "JobStateMachine",
    "WorkerPool",
    "run_job",
    "CleanupScheduler",
    # Storage
    "ArtifactStore",
    "FallbackArtifactStore",
    "LocalArtifactStore",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "TextStore",
    # Errors
    "GenerationError",
    "InvalidTransitionError",
    "RenderFailure",
    "SourceNotFound",
    "StorageFailure",
    "PUBLIC_MESSAGES",
    "RENDER_FAILURE",
    "SOURCE_NOT_FOUND",
    "STORAGE_FAILURE",
]
