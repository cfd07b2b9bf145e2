"""
Module: pipeline.errors

Purpose:
    Failure taxonomy for job execution. Every failure is terminal for
    its job; callers see only the generic `public_message`.

Key Classes:
    - GenerationError: Base class carrying a failure kind
    - SourceNotFound: Text missing or expired when the worker starts
    - RenderFailure: Raster or font fault mid-page
    - StorageFailure: Artifact could not be persisted anywhere
    - InvalidTransitionError: Illegal job state transition

Used By:
    - pipeline.processor: Raises during execution
    - pipeline.worker_pool: Maps exceptions to failed jobs
    - pipeline.state: Transition guard
"""

from __future__ import annotations

SOURCE_NOT_FOUND = "source_not_found"
RENDER_FAILURE = "render_failure"
STORAGE_FAILURE = "storage_failure"

PUBLIC_MESSAGES = {
    SOURCE_NOT_FOUND: "The source text could not be found. Upload it again and resubmit.",
    RENDER_FAILURE: "The document could not be rendered. Please resubmit the job.",
    STORAGE_FAILURE: "The finished document could not be saved. Please resubmit the job.",
}


class GenerationError(Exception):
    """Base class for failures that end a job."""

    kind = RENDER_FAILURE

    @property
    def public_message(self) -> str:
        """Generic, non-leaking message for status queries."""
        return PUBLIC_MESSAGES[self.kind]


class SourceNotFound(GenerationError):
    """Referenced text is missing, expired or empty."""

    kind = SOURCE_NOT_FOUND


class RenderFailure(GenerationError):
    """Raster or font-resource fault while rendering a page."""

    kind = RENDER_FAILURE


class StorageFailure(GenerationError):
    """Artifact could not be written to the primary store or its fallback."""

    kind = STORAGE_FAILURE


class InvalidTransitionError(Exception):
    """Raised when a job is moved along a transition its state forbids."""
    pass
