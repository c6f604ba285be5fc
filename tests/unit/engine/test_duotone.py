"""Tests for the duotone colour transform."""

import pytest
from PIL import Image

from ito.engine.duotone import DuotoneSpec, apply_duotone, duotone_image, hex_to_rgb
from ito.engine.formats import OutputFormat
from ito.engine.pipeline import ImagePipeline
from ito.exceptions import EncodeError


class TestHexToRgb:
    """Tests for hex_to_rgb()."""

    def test_long_form(self):
        assert hex_to_rgb("#f00e2e") == (240, 14, 46)

    def test_short_form(self):
        assert hex_to_rgb("#fff") == (255, 255, 255)

    @pytest.mark.parametrize("value", ["#12345", "#zzzzzz", "red"])
    def test_invalid(self, value):
        with pytest.raises(EncodeError, match="Invalid duotone colour"):
            hex_to_rgb(value)


class TestDuotoneImage:
    """Tests for duotone_image()."""

    def test_white_maps_to_highlight_black_to_shadow(self):
        image = Image.new("RGB", (2, 1))
        image.putpixel((0, 0), (255, 255, 255))
        image.putpixel((1, 0), (0, 0, 0))
        result = duotone_image(image, highlight=(240, 14, 46), shadow=(25, 37, 80))
        assert result.getpixel((0, 0)) == (240, 14, 46)
        assert result.getpixel((1, 0)) == (25, 37, 80)

    def test_opacity_blends_with_original(self):
        image = Image.new("RGB", (1, 1), (0, 0, 0))
        result = duotone_image(
            image, highlight=(255, 255, 255), shadow=(200, 200, 200), opacity=50
        )
        assert result.getpixel((0, 0)) == (100, 100, 100)

    def test_keeps_alpha(self):
        image = Image.new("RGBA", (1, 1), (255, 255, 255, 77))
        result = duotone_image(image, highlight=(1, 2, 3), shadow=(0, 0, 0))
        assert result.mode == "RGBA"
        assert result.getpixel((0, 0))[3] == 77

    def test_drops_alpha_when_not_kept(self):
        image = Image.new("RGBA", (1, 1), (255, 255, 255, 77))
        result = duotone_image(
            image, highlight=(1, 2, 3), shadow=(0, 0, 0), keep_alpha=False
        )
        assert result.mode == "RGB"


class TestApplyDuotone:
    """Tests for apply_duotone()."""

    def test_appends_step(self):
        pipeline = ImagePipeline(Image.new("RGB", (4, 4)), "x")
        spec = DuotoneSpec("#ffffff", "#000000")
        assert apply_duotone(spec, OutputFormat.PNG, pipeline) is pipeline
        assert pipeline.step_names == ["duotone"]

    def test_invalid_colour_fails_at_configuration(self):
        pipeline = ImagePipeline(Image.new("RGB", (4, 4)), "x")
        with pytest.raises(EncodeError):
            apply_duotone(DuotoneSpec("nope", "#000"), OutputFormat.PNG, pipeline)
        assert pipeline.step_names == []

    def test_invalid_opacity(self):
        pipeline = ImagePipeline(Image.new("RGB", (4, 4)), "x")
        with pytest.raises(EncodeError, match="opacity"):
            apply_duotone(
                DuotoneSpec("#fff", "#000", opacity=150), OutputFormat.PNG, pipeline
            )

    def test_as_dict_omits_missing_opacity(self):
        assert DuotoneSpec("#fff", "#000").as_dict() == {
            "highlight": "#fff",
            "shadow": "#000",
        }
