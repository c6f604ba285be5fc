"""Tests for conditional step composition."""

import pytest
from PIL import Image

from ito.engine.duotone import DuotoneSpec
from ito.engine.formats import OutputFormat
from ito.engine.pipeline import ImagePipeline
from ito.exceptions import EncodeError
from ito.transform.steps import compose_pipeline, round_dimension
from ito.transform.types import TransformArgs


@pytest.fixture
def pipeline() -> ImagePipeline:
    return ImagePipeline(Image.new("RGB", (100, 80), "red"), "test.jpg")


class TestRoundDimension:
    """Tests for round_dimension()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, None), (0, None), (500, 500), (499.5, 500), (499.4, 499), (0.5, 1)],
    )
    def test_rounding(self, value, expected):
        assert round_dimension(value) == expected


class TestComposePipeline:
    """Tests for compose_pipeline()."""

    def test_auto_orients_when_rotate_absent(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="png"))
        assert pipeline.step_names[0] == "auto_orient"

    def test_explicit_rotate_replaces_auto_orient(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="png", rotate=90))
        assert "auto_orient" not in pipeline.step_names
        assert pipeline.step_names[-1] == "rotate:90"

    def test_step_order(self, pipeline):
        """Geometry, then grayscale, then rotation, then duotone."""
        args = TransformArgs(
            to_format="png",
            width=50,
            grayscale=True,
            rotate=180,
            duotone=DuotoneSpec("#ffffff", "#000000"),
        )
        compose_pipeline(pipeline, args)
        assert pipeline.step_names == [
            "resize:50xNone:cover",
            "grayscale",
            "rotate:180",
            "duotone",
        ]

    def test_fractional_dimensions_rounded(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="png", width=49.6))
        assert "resize:50xNone:cover" in pipeline.step_names

    def test_no_resize_without_dimensions(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="png"))
        assert not any(name.startswith("resize") for name in pipeline.step_names)

    def test_stages_only_terminal_png(self, pipeline):
        compose_pipeline(
            pipeline, TransformArgs(to_format="png", png_compression_level=6)
        )
        assert pipeline.output.format is OutputFormat.PNG
        assert pipeline.output.options == {"compress_level": 6}

    def test_stages_webp_quality(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="webp", quality=70))
        assert pipeline.output.format is OutputFormat.WEBP
        assert pipeline.output.options == {"quality": 70}

    def test_stages_tiff_quality(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="tif", quality=70))
        assert pipeline.output.format is OutputFormat.TIFF

    def test_stages_jpeg_without_mozjpeg(self, pipeline):
        compose_pipeline(
            pipeline, TransformArgs(to_format="jpg", quality=65, jpeg_progressive=False)
        )
        assert pipeline.output.format is OutputFormat.JPG
        assert pipeline.output.options == {"quality": 65, "progressive": False}

    def test_leaves_jpeg_unstaged_with_mozjpeg(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="jpg"), use_mozjpeg=True)
        assert pipeline.output is None

    def test_gif_staged_without_options(self, pipeline):
        compose_pipeline(pipeline, TransformArgs(to_format="gif"))
        assert pipeline.output.format is OutputFormat.GIF
        assert pipeline.output.options == {}

    def test_invalid_format_raises(self, pipeline):
        with pytest.raises(EncodeError):
            compose_pipeline(pipeline, TransformArgs(to_format="heic"))

    def test_invalid_fit_raises(self, pipeline):
        with pytest.raises(EncodeError, match="Invalid fit"):
            compose_pipeline(
                pipeline, TransformArgs(to_format="png", width=10, fit="squash")
            )

    def test_invalid_background_raises(self, pipeline):
        with pytest.raises(EncodeError, match="background"):
            compose_pipeline(
                pipeline,
                TransformArgs(to_format="png", width=10, background="not-a-colour"),
            )

    def test_invalid_crop_focus_raises(self, pipeline):
        with pytest.raises(EncodeError, match="crop focus"):
            compose_pipeline(
                pipeline, TransformArgs(to_format="png", width=10, crop_focus="up")
            )
