"""
Unit tests for artifact stores and the storage fallback.
"""

import os
import time
from unittest.mock import MagicMock

import pytest

from handwriting_toolkit.core.models.jobs import ArtifactReference
from handwriting_toolkit.pipeline.artifacts import FallbackArtifactStore, LocalArtifactStore
from handwriting_toolkit.pipeline.errors import StorageFailure


class TestLocalArtifactStore:
    """Tests for LocalArtifactStore."""

    def test_write_when_no_base_url_then_local_path_reference(self, tmp_path):
        store = LocalArtifactStore(tmp_path / "out")
        ref = store.write(b"%PDF-1.4 data", "job-1")

        assert not ref.is_remote
        assert ref.location == str(tmp_path / "out" / "job-1.pdf")
        with store.open(ref) as f:
            assert f.read() == b"%PDF-1.4 data"

    def test_write_when_base_url_then_remote_reference(self, tmp_path):
        store = LocalArtifactStore(tmp_path, public_base_url="https://cdn.example.com/pdfs/")
        ref = store.write(b"pdf", "job-2")

        assert ref.is_remote
        assert ref.location == "https://cdn.example.com/pdfs/job-2.pdf"
        with store.open(ref) as f:
            assert f.read() == b"pdf"

    def test_write_when_job_id_unsafe_then_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            LocalArtifactStore(tmp_path).write(b"x", "../../evil")

    def test_write_when_done_then_no_temp_files_left(self, tmp_path):
        LocalArtifactStore(tmp_path).write(b"x", "job-3")
        assert [p.name for p in tmp_path.iterdir()] == ["job-3.pdf"]

    def test_sweep_when_old_artifacts_then_removed(self, tmp_path):
        store = LocalArtifactStore(tmp_path)
        store.write(b"old", "old")
        store.write(b"new", "new")
        stale = time.time() - 3600
        os.utime(tmp_path / "old.pdf", (stale, stale))

        assert store.sweep(time.time() - 1800) == 1
        assert (tmp_path / "new.pdf").exists()

    def test_sweep_when_root_missing_then_zero(self, tmp_path):
        assert LocalArtifactStore(tmp_path / "never-created").sweep(time.time()) == 0


class TestFallbackArtifactStore:
    """Primary store with one fallback attempt."""

    def test_write_when_primary_ok_then_fallback_unused(self, tmp_path):
        fallback = MagicMock()
        store = FallbackArtifactStore(LocalArtifactStore(tmp_path), fallback)

        ref = store.write(b"pdf", "job-1")

        assert ref.store == "local"
        fallback.write.assert_not_called()

    def test_write_when_primary_fails_then_fallback_used(self, tmp_path, caplog):
        primary = MagicMock()
        primary.name = "remote"
        primary.write.side_effect = OSError("bucket unavailable")
        fallback = LocalArtifactStore(tmp_path, name="local-fallback")
        store = FallbackArtifactStore(primary, fallback)

        ref = store.write(b"pdf", "job-1")

        assert ref.store == "local-fallback"
        assert (tmp_path / "job-1.pdf").read_bytes() == b"pdf"
        assert "bucket unavailable" in caplog.text
        with store.open(ref) as f:
            assert f.read() == b"pdf"

    def test_write_when_both_fail_then_storage_failure(self):
        primary = MagicMock()
        primary.write.side_effect = OSError("primary down")
        fallback = MagicMock()
        fallback.write.side_effect = OSError("disk full")
        store = FallbackArtifactStore(primary, fallback)

        with pytest.raises(StorageFailure):
            store.write(b"pdf", "job-1")
        assert fallback.write.call_count == 1

    def test_sweep_when_called_then_both_stores_swept(self):
        primary, fallback = MagicMock(), MagicMock()
        primary.sweep.return_value = 2
        fallback.sweep.return_value = 1

        assert FallbackArtifactStore(primary, fallback).sweep(0.0) == 3

    def test_open_when_primary_reference_then_primary_used(self):
        primary, fallback = MagicMock(), MagicMock()
        primary.name, fallback.name = "local", "local-fallback"
        ref = ArtifactReference(location="/x.pdf", store="local")

        FallbackArtifactStore(primary, fallback).open(ref)

        primary.open.assert_called_once_with(ref)
