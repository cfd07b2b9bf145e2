"""
Integration tests for GenerationService.

Submission, status queries, result retrieval, persistence across
restarts and expiry.
"""

import io
import time

import pytest
from pypdf import PdfReader

from handwriting_toolkit.core.models.jobs import JobStatus
from handwriting_toolkit.core.schemas.validator import ValidationError
from handwriting_toolkit.pipeline.config import ServiceConfig
from handwriting_toolkit.pipeline.errors import PUBLIC_MESSAGES, SOURCE_NOT_FOUND
from handwriting_toolkit.pipeline.service import GenerationService, ResultNotReadyError


def _config(tmp_path, **overrides):
    values = dict(data_dir=tmp_path / "data", page_width_px=620, page_height_px=877, dpi=75)
    values.update(overrides)
    return ServiceConfig(**values)


@pytest.fixture
def service(tmp_path, fonts):
    svc = GenerationService(_config(tmp_path), fonts=fonts)
    svc.start()
    yield svc
    svc.close()


class TestSubmission:
    """submit_job validation."""

    def test_submit_when_valid_then_completes_with_pdf(self, service):
        ref = service.save_text("Dear diary,\ntoday I wrote a test.")
        job_id = service.submit_job(ref, {"fontFamily": "Kalam", "randomization": {"errorRate": 0}})

        status = service.wait(job_id, timeout=60)

        assert status.state == JobStatus.COMPLETED
        assert status.progress == 100
        assert status.page_count == 1
        assert status.error is None
        pdf = service.fetch_result(job_id).read()
        assert len(PdfReader(io.BytesIO(pdf)).pages) == 1

    def test_submit_when_settings_invalid_then_rejected_before_queueing(self, service):
        ref = service.save_text("text")
        with pytest.raises(ValidationError):
            service.submit_job(ref, {"fontSize": -1})
        assert service.jobs.keys() == []

    @pytest.mark.parametrize("text_ref", ["", None])
    def test_submit_when_text_ref_absent_then_validation_error(self, service, text_ref):
        with pytest.raises(ValidationError) as exc:
            service.submit_job(text_ref, {})
        assert exc.value.path == "text_ref"

    def test_submit_when_seed_absent_then_seed_assigned(self, service):
        job_id = service.submit_job(service.save_text("seedless"), {})
        service.wait(job_id, timeout=60)

        record = service.jobs.get(job_id)
        assert isinstance(record["settings"]["seed"], int)

    def test_submit_when_seed_given_then_kept(self, service):
        job_id = service.submit_job(service.save_text("seeded"), {"seed": 2024})
        service.wait(job_id, timeout=60)
        assert service.jobs.get(job_id)["settings"]["seed"] == 2024


class TestStatusAndResults:
    """query_status and fetch_result."""

    def test_query_when_unknown_job_then_key_error(self, service):
        with pytest.raises(KeyError):
            service.query_status("does-not-exist")

    def test_fetch_when_job_failed_then_not_ready(self, service):
        job_id = service.submit_job("no-such-text", {})
        status = service.wait(job_id, timeout=60)

        assert status.state == JobStatus.FAILED
        assert status.error == PUBLIC_MESSAGES[SOURCE_NOT_FOUND]
        with pytest.raises(ResultNotReadyError):
            service.fetch_result(job_id)

    def test_fetch_when_public_base_url_then_redirect(self, tmp_path, fonts):
        config = _config(tmp_path, public_base_url="https://files.example.com/out")
        with GenerationService(config, fonts=fonts) as svc:
            job_id = svc.submit_job(svc.save_text("redirect me"), {})
            svc.wait(job_id, timeout=60)
            handle = svc.fetch_result(job_id)

        assert handle.stream is None
        assert handle.redirect_url == f"https://files.example.com/out/{job_id}.pdf"

    def test_query_when_service_restarted_then_answered_from_record(self, tmp_path, fonts):
        config = _config(tmp_path)
        with GenerationService(config, fonts=fonts) as first:
            job_id = first.submit_job(first.save_text("persist me"), {})
            first.wait(job_id, timeout=60)

        with GenerationService(config, fonts=fonts) as second:
            status = second.query_status(job_id)
            pdf = second.fetch_result(job_id).read()

        assert status.state == JobStatus.COMPLETED
        assert status.progress == 100
        assert pdf.startswith(b"%PDF")

    def test_settings_when_caller_mutates_after_submit_then_output_unchanged(self, service):
        """The job renders the settings as they were at submission."""
        ref = service.save_text("The quick brown fox jumps over the lazy dog")
        payload = {"fontSize": 20, "paperColor": "warm", "seed": 5}

        mutated_job = service.submit_job(ref, payload)
        payload["fontSize"] = 60
        payload["paperColor"] = "vintage"
        reference_job = service.submit_job(ref, {"fontSize": 20, "paperColor": "warm", "seed": 5})

        service.wait(mutated_job, timeout=60)
        service.wait(reference_job, timeout=60)

        assert service.fetch_result(mutated_job).read() == service.fetch_result(reference_job).read()

    def test_fetch_when_output_dir_unwritable_then_served_from_fallback(self, tmp_path, fonts):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        config = _config(tmp_path, output_dir=blocker / "output")

        with GenerationService(config, fonts=fonts) as svc:
            job_id = svc.submit_job(svc.save_text("Hello world"), {})
            status = svc.wait(job_id, timeout=60)
            pdf = svc.fetch_result(job_id).read()

        assert status.state == JobStatus.COMPLETED
        assert status.result_ref.store == "local-fallback"
        assert (config.resolved_fallback_output_dir / f"{job_id}.pdf").exists()
        assert pdf.startswith(b"%PDF")


class TestExpiry:
    """sweep_expired."""

    def test_sweep_when_everything_expired_then_removed(self, tmp_path, fonts):
        config = _config(tmp_path, expiry_seconds=0.01)
        with GenerationService(config, fonts=fonts) as svc:
            ref = svc.save_text("short lived")
            job_id = svc.submit_job(ref, {})
            svc.wait(job_id, timeout=60)
            time.sleep(0.1)

            removed = svc.sweep_expired()

            assert removed == 3
            assert svc.texts.read(ref) is None
            with pytest.raises(KeyError):
                svc.query_status(job_id)
            assert not list(config.resolved_output_dir.glob("*.pdf"))

    def test_sweep_when_fresh_then_nothing_removed(self, service):
        job_id = service.submit_job(service.save_text("fresh"), {})
        service.wait(job_id, timeout=60)

        assert service.sweep_expired() == 0
        assert service.query_status(job_id).state == JobStatus.COMPLETED
