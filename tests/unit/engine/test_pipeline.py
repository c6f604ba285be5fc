"""Tests for the deferred image pipeline."""

import io

import pytest
from PIL import Image

from ito.engine.formats import OutputFormat
from ito.engine.pipeline import (
    ImagePipeline,
    decode_image,
    describe_source,
    write_output,
)
from ito.exceptions import DecodeError, EncodeError, OutputWriteError

ORIENTATION_TAG = 0x0112


def _open(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestDecodeImage:
    """Tests for decode_image()."""

    def test_decodes_path(self, sample_jpeg):
        image, _ = decode_image(sample_jpeg)
        assert image.size == (1000, 800)

    def test_decodes_bytes(self, sample_jpeg):
        image, _ = decode_image(sample_jpeg.read_bytes())
        assert image.format == "JPEG"

    def test_corrupt_source_names_file(self, corrupt_image):
        with pytest.raises(DecodeError, match="broken.jpg") as exc_info:
            decode_image(corrupt_image)
        assert exc_info.value.source == str(corrupt_image)

    def test_missing_file(self, temp_dir):
        with pytest.raises(DecodeError, match="Failed to process image"):
            decode_image(temp_dir / "nope.png")

    def test_orientation_reset_in_captured_exif(self, rotated_jpeg):
        _, metadata = decode_image(rotated_jpeg)
        exif = Image.Exif()
        exif.load(metadata.exif)
        assert exif[ORIENTATION_TAG] == 1

    def test_tiff_layout_tags_not_captured(self, sample_tiff):
        _, metadata = decode_image(sample_tiff)
        exif = Image.Exif()
        exif.load(metadata.exif)
        # ImageWidth, ImageLength, StripOffsets, StripByteCounts
        assert not {256, 257, 273, 279}.intersection(exif)
        assert exif[ORIENTATION_TAG] == 1

    def test_captures_source_orientation(self, sample_tiff):
        _, metadata = decode_image(sample_tiff)
        assert metadata.orientation == 6

    def test_decoded_image_keeps_its_own_tags(self, sample_tiff):
        image, _ = decode_image(sample_tiff)
        assert image.getexif()[ORIENTATION_TAG] == 6

    def test_describe_bytes(self):
        assert describe_source(b"abcd") == "<4 bytes>"


class TestImagePipeline:
    """Tests for ImagePipeline."""

    @pytest.mark.asyncio
    async def test_open_and_encode_png(self, sample_jpeg):
        pipeline = await ImagePipeline.open(sample_jpeg)
        data = await pipeline.resize(100, None).png().to_buffer()
        result = _open(data)
        assert result.format == "PNG"
        assert result.size == (100, 80)

    @pytest.mark.asyncio
    async def test_open_corrupt_raises(self, corrupt_image):
        with pytest.raises(DecodeError):
            await ImagePipeline.open(corrupt_image)

    @pytest.mark.asyncio
    async def test_nothing_rendered_until_materialized(self, sample_jpeg):
        """Configuration only records steps."""
        pipeline = await ImagePipeline.open(sample_jpeg)
        calls = []
        pipeline.apply("probe", lambda im: calls.append(im.size) or im)
        assert calls == []
        await pipeline.png().to_buffer()
        assert calls == [(1000, 800)]

    @pytest.mark.asyncio
    async def test_clone_isolation(self, sample_jpeg):
        """Configuring a clone leaves the original untouched."""
        base = await ImagePipeline.open(sample_jpeg)
        base.resize(500, None)
        twin = base.clone()
        twin.grayscale().jpeg(quality=40)

        assert base.step_names == ["resize:500xNone:cover"]
        assert base.output is None
        assert twin.step_names == ["resize:500xNone:cover", "grayscale"]

        original = _open(await base.png().to_buffer())
        gray = _open(await twin.to_buffer())
        assert original.mode == "RGB"
        assert gray.mode == "L"
        assert original.size == gray.size == (500, 400)

    @pytest.mark.asyncio
    async def test_source_not_mutated_by_render(self, sample_jpeg):
        pipeline = await ImagePipeline.open(sample_jpeg)
        pipeline.resize(10, 10).png()
        await pipeline.to_buffer()
        assert pipeline.source_size == (1000, 800)

    @pytest.mark.asyncio
    async def test_to_format_replaces_previous_directive(self, sample_jpeg):
        pipeline = await ImagePipeline.open(sample_jpeg)
        pipeline.png().webp(quality=60)
        assert pipeline.output.format is OutputFormat.WEBP
        assert _open(await pipeline.to_buffer()).format == "WEBP"

    @pytest.mark.asyncio
    async def test_unstaged_pipeline_keeps_source_format(self, sample_jpeg):
        pipeline = await ImagePipeline.open(sample_jpeg)
        assert _open(await pipeline.to_buffer()).format == "JPEG"

    @pytest.mark.asyncio
    async def test_auto_orient_applies_exif_rotation(self, rotated_jpeg):
        pipeline = await ImagePipeline.open(rotated_jpeg)
        result = _open(await pipeline.auto_orient().png().to_buffer())
        assert result.size == (800, 1000)

    @pytest.mark.asyncio
    async def test_rotate_without_angle_auto_orients(self, rotated_jpeg):
        pipeline = await ImagePipeline.open(rotated_jpeg)
        assert pipeline.rotate().step_names == ["auto_orient"]

    @pytest.mark.asyncio
    async def test_metadata_kept_when_requested(self, rotated_jpeg):
        pipeline = await ImagePipeline.open(rotated_jpeg, keep_metadata=True)
        result = _open(await pipeline.auto_orient().jpeg().to_buffer())
        assert result.getexif()[ORIENTATION_TAG] == 1

    @pytest.mark.asyncio
    async def test_metadata_dropped_by_default(self, rotated_jpeg):
        pipeline = await ImagePipeline.open(rotated_jpeg)
        result = _open(await pipeline.jpeg().to_buffer())
        assert ORIENTATION_TAG not in result.getexif()

    @pytest.mark.asyncio
    async def test_tiff_to_tiff_keeps_metadata(self, sample_tiff):
        pipeline = await ImagePipeline.open(sample_tiff, keep_metadata=True)
        result = _open(await pipeline.auto_orient().tiff().to_buffer())
        assert result.size == (800, 1000)
        assert result.getexif()[ORIENTATION_TAG] == 1

    @pytest.mark.asyncio
    async def test_cmyk_tiff_source_encodes(self, temp_dir):
        path = temp_dir / "print.tif"
        Image.new("CMYK", (200, 100), (0, 100, 100, 0)).save(path, format="TIFF")
        pipeline = await ImagePipeline.open(path, keep_metadata=True)
        result = _open(await pipeline.tiff().to_buffer())
        assert result.size == (200, 100)
        assert result.mode == "CMYK"

    @pytest.mark.asyncio
    async def test_alpha_flattened_for_jpeg(self, sample_png_rgba):
        pipeline = await ImagePipeline.open(sample_png_rgba)
        assert _open(await pipeline.jpeg().to_buffer()).mode == "RGB"

    @pytest.mark.asyncio
    async def test_to_file_writes_and_creates_parents(self, sample_jpeg, temp_dir):
        target = temp_dir / "nested" / "out.png"
        pipeline = await ImagePipeline.open(sample_jpeg)
        await pipeline.resize(20, None).png().to_file(target)
        assert _open(target.read_bytes()).size == (20, 16)

    @pytest.mark.asyncio
    async def test_engine_failure_wrapped(self, sample_jpeg):
        pipeline = await ImagePipeline.open(sample_jpeg)

        def broken(image):
            raise ValueError("pixel soup")

        pipeline.apply("broken", broken).png()
        with pytest.raises(EncodeError, match="pixel soup"):
            await pipeline.to_buffer()

    @pytest.mark.parametrize(
        ("width", "height"), [(0, None), (-5, 10), (10.5, None)]
    )
    def test_resize_rejects_bad_dimensions(self, width, height):
        pipeline = ImagePipeline(Image.new("RGB", (10, 10)), "x")
        with pytest.raises(EncodeError, match="positive integer"):
            pipeline.resize(width, height)

    def test_resize_validates_options_eagerly(self):
        pipeline = ImagePipeline(Image.new("RGB", (10, 10)), "x")
        with pytest.raises(EncodeError):
            pipeline.resize(5, 5, fit="bogus")
        assert pipeline.step_names == []


class TestWriteOutput:
    """Tests for write_output()."""

    def test_write_failure_raises_output_write_error(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("x")
        with pytest.raises(OutputWriteError) as exc_info:
            write_output(blocker / "child.png", b"data")
        assert isinstance(exc_info.value, OSError)
        assert exc_info.value.path == blocker / "child.png"
