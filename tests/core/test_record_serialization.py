"""
Unit Tests for Serialization

Settings wire form and persisted job records.
"""

from datetime import datetime

from handwriting_toolkit.core.models.jobs import ArtifactReference, Job, JobStatus
from handwriting_toolkit.core.models.settings import Margins, Randomization, Settings
from handwriting_toolkit.core.utils.serialization import (
    job_from_record,
    job_to_record,
    settings_from_dict,
    settings_to_dict,
)


class TestSettingsSerialization:
    """Tests for settings_to_dict / settings_from_dict."""

    def test_to_dict_when_called_then_uses_camel_case(self):
        data = settings_to_dict(Settings(seed=3))

        assert data["fontFamily"] == "Caveat"
        assert data["paperPattern"] == "lined"
        assert data["randomization"]["errorRate"] == 0.02
        assert data["margins"] == {"top": 50, "right": 40, "bottom": 50, "left": 60}
        assert data["seed"] == 3

    def test_from_dict_when_wire_form_then_equal_settings(self):
        settings = Settings(
            font_family="Handlee",
            paper_color="vintage",
            margins=Margins(top=20, right=20, bottom=20, left=20),
            randomization=Randomization(error_rate=0.3),
            seed=11,
        )
        assert settings_from_dict(settings_to_dict(settings)) == settings


class TestJobRecords:
    """Tests for job_to_record / job_from_record."""

    def test_record_when_completed_job_then_restores_status_view_fields(self):
        job = Job(
            id="job-1",
            text_ref="text-1",
            settings=Settings(seed=5),
            status=JobStatus.COMPLETED,
            progress=100.0,
            started_at=datetime(2024, 1, 1, 12, 0, 0),
            completed_at=datetime(2024, 1, 1, 12, 0, 9),
            result_ref=ArtifactReference(location="/out/job-1.pdf"),
            page_count=4,
            warnings=["Page 2 made no progress"],
        )

        restored = job_from_record(job_to_record(job))

        assert restored.status == JobStatus.COMPLETED
        assert restored.result_ref == job.result_ref
        assert restored.completed_at == job.completed_at
        assert restored.page_count == 4
        assert restored.warnings == ["Page 2 made no progress"]
        assert restored.settings.seed == 5

    def test_record_when_failed_job_then_keeps_generic_message(self):
        job = Job(
            id="job-2",
            text_ref="missing",
            settings=Settings(seed=1),
            status=JobStatus.FAILED,
            error_kind="source_not_found",
            error_message="The source text could not be found.",
        )
        record = job_to_record(job)

        assert record["result_ref"] is None
        assert record["status"] == "failed"
        assert job_from_record(record).error_kind == "source_not_found"
