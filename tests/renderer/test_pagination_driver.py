"""
Unit tests for the pagination driver.

Progress reporting, reconstruction of consumed text, the forced-chunk
fallback and the page ceiling.
"""

import random

import pytest

from handwriting_toolkit.core.models.settings import Settings
from handwriting_toolkit.renderer.paginator import compute_progress, paginate


@pytest.fixture
def paragraph():
    return "\n".join(
        " ".join(f"w{line}-{i}" for i in range(12)) for line in range(60)
    )


class TestComputeProgress:
    """Tests for compute_progress."""

    @pytest.mark.parametrize("orig,remaining,expected", [
        (200, 50, 75.0),
        (200, 200, 0.0),
        (200, 0, 100.0),
        (0, 0, 100.0),
        (100, 150, 0.0),
    ])
    def test_progress_when_lengths_given_then_clamped_percentage(self, orig, remaining, expected):
        assert compute_progress(orig, remaining) == expected


class TestPaginate:
    """Tests for paginate."""

    def test_paginate_when_short_text_then_one_page(self, plain_settings, small_geometry, fonts):
        reports = []
        result = paginate(
            "Hello world",
            plain_settings,
            geometry=small_geometry,
            fonts=fonts,
            on_progress=reports.append,
        )

        assert result.page_count == 1
        assert not result.truncated
        assert reports == [100.0]
        assert result.rendered_text == "Hello world"

    def test_paginate_when_long_text_then_progress_non_decreasing(self, plain_settings, small_geometry, fonts, paragraph):
        reports = []
        result = paginate(paragraph, plain_settings, geometry=small_geometry, fonts=fonts, on_progress=reports.append)

        assert result.page_count > 1
        assert len(reports) == result.page_count
        assert reports == sorted(reports)
        assert reports[-1] == 100.0

    def test_paginate_when_no_drops_then_segments_reconstruct_text(self, messy_settings, small_geometry, fonts, paragraph):
        result = paginate(paragraph, messy_settings, geometry=small_geometry, fonts=fonts)

        assert result.degraded_pages == 0
        assert result.rendered_text == paragraph

    def test_paginate_when_pages_emitted_then_consecutive_indices(self, plain_settings, small_geometry, fonts, paragraph):
        pages = []
        result = paginate(paragraph, plain_settings, geometry=small_geometry, fonts=fonts, on_page=pages.append)

        assert [p.index for p in pages] == list(range(result.page_count))
        assert all(p.image.size == (620, 877) for p in pages)

    def test_paginate_when_rng_omitted_then_seeded_from_settings(self, messy_settings, small_geometry, fonts):
        first, second = [], []
        paginate("Hello world", messy_settings, geometry=small_geometry, fonts=fonts, on_page=first.append)
        paginate("Hello world", messy_settings, geometry=small_geometry, fonts=fonts, on_page=second.append)

        assert first[0].image.tobytes() == second[0].image.tobytes()

    def test_paginate_when_rng_given_then_shared_across_pages(self, messy_settings, small_geometry, fonts, paragraph):
        """One random stream for the whole job: reseeding gives the same document."""
        a, b = [], []
        paginate(paragraph, messy_settings, geometry=small_geometry, fonts=fonts, rng=random.Random(3), on_page=a.append)
        paginate(paragraph, messy_settings, geometry=small_geometry, fonts=fonts, rng=random.Random(3), on_page=b.append)

        assert [p.image.tobytes() for p in a] == [p.image.tobytes() for p in b]

    def test_paginate_when_timings_collected_then_one_entry_per_page(self, plain_settings, small_geometry, fonts, paragraph):
        result = paginate(paragraph, plain_settings, geometry=small_geometry, fonts=fonts, on_page=lambda page: None)

        assert sorted(result.timings.page_timings) == list(range(result.page_count))
        assert "layout" in result.timings.page_timings[0]
        assert "hand_off" in result.timings.page_timings[0]

    @pytest.mark.parametrize("kwargs", [{"max_pages": 0}, {"chunk_size": 0}])
    def test_paginate_when_limits_not_positive_then_raises(self, plain_settings, kwargs):
        with pytest.raises(ValueError):
            paginate("text", plain_settings, **kwargs)


class TestForcedChunkFallback:
    """Pages that make no progress."""

    def test_paginate_when_token_too_wide_then_chunks_dropped(self, plain_settings, small_geometry, fonts):
        text = "x" * 1_000
        result = paginate(text, plain_settings, geometry=small_geometry, fonts=fonts, chunk_size=100)

        assert result.page_count == 10
        assert result.degraded_pages == 10
        assert not result.truncated
        assert result.remaining_chars == 0
        assert len(result.warnings) == 10
        assert "no progress" in result.warnings[0]

    def test_paginate_when_mixed_text_then_consumed_and_dropped_cover_prefix(self, plain_settings, small_geometry, fonts):
        text = "before the wall " + "z" * 450 + " after the wall"
        result = paginate(text, plain_settings, geometry=small_geometry, fonts=fonts, chunk_size=100)

        assert result.degraded_pages >= 1
        covered = "".join(s.consumed_text + s.dropped_text for s in result.segments)
        assert covered == text
        assert result.segments[0].consumed_text == "before the wall "


class TestPageCeiling:
    """Truncation at max_pages."""

    def test_paginate_when_ceiling_reached_then_truncated(self, plain_settings, small_geometry, fonts, paragraph):
        reports = []
        result = paginate(
            paragraph,
            plain_settings,
            geometry=small_geometry,
            fonts=fonts,
            max_pages=2,
            on_progress=reports.append,
        )

        assert result.page_count == 2
        assert result.truncated
        assert result.remaining_chars > 0
        assert paragraph.startswith(result.rendered_text)
        assert "ceiling" in result.warnings[-1]
        assert reports[-1] < 100.0

    def test_paginate_when_text_ends_on_last_allowed_page_then_not_truncated(self, small_geometry, fonts):
        result = paginate("one page only", Settings(seed=1), geometry=small_geometry, fonts=fonts, max_pages=1)
        assert result.page_count == 1
        assert not result.truncated
