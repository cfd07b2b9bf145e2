"""
Handwriting Toolkit Core Package

Shared data models, payload validation and serialization used by the
renderer and the job pipeline.
"""

from .models import (
    ArtifactReference,
    Job,
    JobStatus,
    JobStatusView,
    Margins,
    PaperColor,
    PaperPattern,
    Randomization,
    Settings,
)
from .schemas import ValidationError, validate_settings

__all__ = [
    "ArtifactReference",
    "Job",
    "JobStatus",
    "JobStatusView",
    "Margins",
    "PaperColor",
    "PaperPattern",
    "Randomization",
    "Settings",
    "ValidationError",
    "validate_settings",
]
