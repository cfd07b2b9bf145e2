"""Tests for ServiceConfig validation."""

from pathlib import Path

import pytest

from handwriting_toolkit.pipeline.config import ServiceConfig


class TestServiceConfig:
    """Tests for ServiceConfig."""

    def test_defaults_when_constructed_then_a4_150_dpi_single_worker(self, tmp_path):
        config = ServiceConfig(data_dir=tmp_path)

        assert config.max_workers == 1
        assert config.max_pages == 500
        assert config.forced_chunk_size == 100
        assert config.geometry.width == 1240
        assert config.geometry.height == 1754
        assert config.expiry_seconds == 1800
        assert config.cleanup_interval_seconds == 300

    def test_paths_when_strings_then_converted(self, tmp_path):
        config = ServiceConfig(data_dir=str(tmp_path), fonts_dir=str(tmp_path / "fonts"))
        assert isinstance(config.data_dir, Path)
        assert config.fonts_dir == tmp_path / "fonts"

    def test_output_dir_when_unset_then_under_data_dir(self, tmp_path):
        config = ServiceConfig(data_dir=tmp_path)
        assert config.resolved_output_dir == tmp_path / "output"
        assert config.resolved_fallback_output_dir == tmp_path / "output-fallback"
        assert config.texts_dir == tmp_path / "texts"
        assert config.jobs_dir == tmp_path / "jobs"

    @pytest.mark.parametrize("kwargs", [
        {"max_workers": 0},
        {"max_pages": 0},
        {"forced_chunk_size": -1},
        {"expiry_seconds": 0},
        {"cleanup_interval_seconds": 0},
        {"page_width_px": 0},
        {"dpi": 0},
        {"public_base_url": "ftp://files"},
    ])
    def test_config_when_invalid_then_raises(self, tmp_path, kwargs):
        with pytest.raises(ValueError):
            ServiceConfig(data_dir=tmp_path, **kwargs)

    def test_fallback_dir_when_given_then_used(self, tmp_path):
        config = ServiceConfig(data_dir=tmp_path, fallback_output_dir=str(tmp_path / "spare"))
        assert config.resolved_fallback_output_dir == tmp_path / "spare"
