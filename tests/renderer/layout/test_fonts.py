"""Tests for font resolution and glyph caching."""

import logging

import pytest

from handwriting_toolkit.renderer.layout.fonts import FontLoadError, FontProvider, GlyphAtlas


class TestFontProvider:
    """Tests for FontProvider."""

    def test_atlas_when_font_not_installed_then_falls_back(self, fonts):
        atlas = fonts.atlas("Caveat", 32)
        assert isinstance(atlas, GlyphAtlas)
        assert atlas.advance("m") > 0

    def test_atlas_when_same_size_then_cached(self, fonts):
        assert fonts.atlas("Kalam", 30.2) is fonts.atlas("Kalam", 29.8)

    def test_atlas_when_sizes_differ_then_wider_text(self, fonts):
        small = fonts.atlas("Handlee", 12).advance("handwriting")
        large = fonts.atlas("Handlee", 48).advance("handwriting")
        assert large > small

    def test_atlas_when_missing_then_warns_once_per_family(self, caplog):
        provider = FontProvider()
        with caplog.at_level(logging.WARNING):
            provider.atlas("Gloria Hallelujah", 20)
            provider.atlas("Gloria Hallelujah", 40)

        warnings = [r for r in caplog.records if "Gloria Hallelujah" in r.getMessage()]
        assert len(warnings) == 1

    def test_atlas_when_font_file_corrupt_then_raises_font_load_error(self, tmp_path):
        (tmp_path / "Caveat-Regular.ttf").write_bytes(b"not a font")
        provider = FontProvider(tmp_path)

        with pytest.raises(FontLoadError):
            provider.atlas("Caveat", 20)


class TestGlyphAtlas:
    """Tests for GlyphAtlas."""

    def test_glyph_when_requested_twice_then_cached(self, fonts):
        atlas = fonts.atlas("Caveat", 40)
        assert atlas.glyph("g") is atlas.glyph("g")
        assert atlas.glyph("g", 1) is not atlas.glyph("g", 0)

    def test_glyph_when_built_then_mask_is_square_around_origin(self, fonts):
        glyph = fonts.atlas("Caveat", 40).glyph("W")

        assert glyph.mask.mode == "L"
        assert glyph.mask.size == (2 * glyph.radius, 2 * glyph.radius)
        assert glyph.mask.getbbox() is not None

    def test_glyph_when_stroked_then_more_coverage(self, fonts):
        atlas = fonts.atlas("Caveat", 40)
        thin = sum(atlas.glyph("o", 0).mask.getdata())
        thick = sum(atlas.glyph("o", 3).mask.getdata())
        assert thick > thin
