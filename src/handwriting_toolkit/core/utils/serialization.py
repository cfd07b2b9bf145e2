"""
Serialization Utilities

to/from JSON-ready dicts for settings snapshots and persisted job records.

- Settings use the wire form (camelCase, nested margins/randomization)
  so a stored snapshot can be re-validated with `validate_settings`.
- Job records carry only what a status query or a resubmission needs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..models.jobs import ArtifactReference, Job, JobStatus
from ..models.settings import Settings
from ..schemas.validator import validate_settings


# ─────────────────────────────────────────────────────────────────────────────
# Settings Serialization
# ─────────────────────────────────────────────────────────────────────────────

def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """
    Serialize Settings to the wire form.

    Args:
        settings: Settings snapshot

    Returns:
        Dictionary suitable for JSON serialization
    """
    margins = settings.margins
    rnd = settings.randomization
    return {
        "fontFamily": settings.font_family,
        "fontSize": settings.font_size,
        "lineSpacing": settings.line_spacing,
        "letterSpacing": settings.letter_spacing,
        "wordSpacing": settings.word_spacing,
        "color": settings.ink_color,
        "paperPattern": settings.paper_pattern.value,
        "paperColor": settings.paper_color.value,
        "margins": {
            "top": margins.top,
            "right": margins.right,
            "bottom": margins.bottom,
            "left": margins.left,
        },
        "randomization": {
            "baselineJitter": rnd.baseline_jitter,
            "sizeJitter": rnd.size_jitter,
            "rotationJitter": rnd.rotation_jitter,
            "inkOpacity": rnd.ink_opacity,
            "errorRate": rnd.error_rate,
            "strokeWidth": rnd.stroke_width,
        },
        "seed": settings.seed,
    }


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """
    Deserialize Settings from the wire form.

    Raises:
        ValidationError: If data is invalid
    """
    return validate_settings(data)


# ─────────────────────────────────────────────────────────────────────────────
# Job Record Serialization
# ─────────────────────────────────────────────────────────────────────────────

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def job_to_record(job: Job) -> dict[str, Any]:
    """
    Serialize a Job to its persisted submission record.

    Args:
        job: Job to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    result = None
    if job.result_ref is not None:
        result = {
            "location": job.result_ref.location,
            "is_remote": job.result_ref.is_remote,
            "store": job.result_ref.store,
        }
    return {
        "id": job.id,
        "text_ref": job.text_ref,
        "settings": settings_to_dict(job.settings),
        "status": job.status.value,
        "progress": job.progress,
        "created_at": _iso(job.created_at),
        "started_at": _iso(job.started_at),
        "completed_at": _iso(job.completed_at),
        "result_ref": result,
        "page_count": job.page_count,
        "truncated": job.truncated,
        "warnings": list(job.warnings),
        "error_kind": job.error_kind,
        "error_message": job.error_message,
    }


def job_from_record(data: dict[str, Any]) -> Job:
    """
    Deserialize a Job from its persisted record.

    Raises:
        ValidationError: If the stored settings are invalid
        KeyError: If a required field is missing
        ValueError: If the status or a timestamp cannot be parsed
    """
    result = data.get("result_ref")
    return Job(
        id=data["id"],
        text_ref=data["text_ref"],
        settings=settings_from_dict(data["settings"]),
        status=JobStatus(data["status"]),
        progress=float(data.get("progress", 0.0)),
        created_at=_parse_iso(data.get("created_at")) or datetime.now(),
        started_at=_parse_iso(data.get("started_at")),
        completed_at=_parse_iso(data.get("completed_at")),
        result_ref=ArtifactReference(**result) if result else None,
        page_count=int(data.get("page_count", 0)),
        truncated=bool(data.get("truncated", False)),
        warnings=list(data.get("warnings", [])),
        error_kind=data.get("error_kind"),
        error_message=data.get("error_message"),
    )
