"""Serialization helpers for core models."""

from .serialization import (
    job_from_record,
    job_to_record,
    settings_from_dict,
    settings_to_dict,
)

__all__ = [
    "job_from_record",
    "job_to_record",
    "settings_from_dict",
    "settings_to_dict",
]
