"""
Core Models Package

Settings snapshots are frozen dataclasses so a render can never observe
a caller-side change. Jobs are plain dataclasses owned by a state machine.
"""

from .settings import (
    DESIGN_HEIGHT,
    DESIGN_WIDTH,
    SUPPORTED_FONTS,
    Margins,
    PaperColor,
    PaperPattern,
    Randomization,
    Settings,
)
from .jobs import ArtifactReference, Job, JobStatus, JobStatusView

__all__ = [
    "DESIGN_HEIGHT",
    "DESIGN_WIDTH",
    "SUPPORTED_FONTS",
    "Margins",
    "PaperColor",
    "PaperPattern",
    "Randomization",
    "Settings",
    "ArtifactReference",
    "Job",
    "JobStatus",
    "JobStatusView",
]
