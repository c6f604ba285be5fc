"""Decode handles: deferred image pipelines over a decoded source.

An ImagePipeline accumulates pixel steps (orient, resize, grayscale,
rotate, arbitrary remaps) and at most one output directive. Nothing is
rendered until to_buffer() or to_file() is awaited. The decoded source
image is shared read-only between clones; every clone owns its own step
list and output directive.
"""

from __future__ import annotations

import io
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PIL import Image

from ito.engine.formats import OutputFormat
from ito.engine.geometry import (
    Fit,
    has_alpha,
    parse_color,
    parse_position,
    resize_image,
    rotate_image,
    to_grayscale,
)
from ito.engine.runtime import run_in_engine
from ito.exceptions import DecodeError, EncodeError, OutputWriteError

logger = logging.getLogger(__name__)

ORIENTATION_TAG = 0x0112

# EXIF orientation value -> transpose that displays the image upright
ORIENTATION_TRANSPOSE: dict[int, Image.Transpose] = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}

# TIFF layout tags. For TIFF sources getexif() returns the image IFD itself,
# and these describe the source's pixel layout, not the output's.
TIFF_STRUCTURE_TAGS: frozenset[int] = frozenset(
    {
        254, 255, 256, 257, 258, 259, 262, 263, 266, 273, 277, 278, 279,
        280, 281, 284, 317, 320, 322, 323, 324, 325, 338, 339, 347,
        513, 514, 530, 531, 532, 34675,
    }
)  # fmt: skip

SourceImage = str | os.PathLike | bytes


@dataclass(frozen=True)
class PipelineStep:
    """A named pixel operation."""

    name: str
    func: Callable[[Image.Image], Image.Image]


@dataclass(frozen=True)
class OutputDirective:
    """Terminal encoding directive: a format and its encoder options."""

    format: OutputFormat
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceMetadata:
    """Embedded metadata captured once at decode time."""

    exif: bytes | None = None
    icc_profile: bytes | None = None
    orientation: int = 1


def describe_source(source: SourceImage) -> str:
    """Human-readable name of a source for messages and logs."""
    if isinstance(source, bytes | bytearray):
        return f"<{len(source)} bytes>"
    return os.fspath(source)


def _read_metadata(image: Image.Image) -> SourceMetadata:
    # Work on a detached copy; the decoded image keeps its own tags
    exif = Image.Exif()
    exif.load(image.getexif().tobytes())
    orientation = exif.get(ORIENTATION_TAG, 1)
    for tag in TIFF_STRUCTURE_TAGS.intersection(exif):
        del exif[tag]
    exif_bytes = None
    if len(exif):
        # Pixels are oriented before encoding, so the tag must not rotate them again
        if ORIENTATION_TAG in exif:
            exif[ORIENTATION_TAG] = 1
        exif_bytes = exif.tobytes()
    return SourceMetadata(
        exif=exif_bytes,
        icc_profile=image.info.get("icc_profile"),
        orientation=orientation if orientation in ORIENTATION_TRANSPOSE else 1,
    )


def orient_image(image: Image.Image, orientation: int) -> Image.Image:
    """Apply an EXIF orientation to pixel data."""
    method = ORIENTATION_TRANSPOSE.get(orientation)
    return image.transpose(method) if method is not None else image


def decode_image(source: SourceImage) -> tuple[Image.Image, SourceMetadata]:
    """Open and fully decode a source image.

    Args:
        source: File path or encoded bytes.

    Returns:
        Tuple of (decoded image, embedded metadata).

    Raises:
        DecodeError: If the source is unreadable or not a decodable image.
    """
    name = describe_source(source)
    try:
        if isinstance(source, bytes | bytearray):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(source)
        image.load()
        metadata = _read_metadata(image)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(name, str(e)) from e
    logger.debug(
        "Decoded %s: %s %dx%d %s", name, image.format, *image.size, image.mode
    )
    return image, metadata


def _prepare_for_format(image: Image.Image, fmt: OutputFormat) -> Image.Image:
    """Convert an image to a mode the target encoder accepts."""
    if fmt is OutputFormat.JPG:
        if image.mode not in ("RGB", "L", "CMYK"):
            return image.convert("RGB")
        return image
    if fmt is OutputFormat.WEBP:
        if image.mode not in ("RGB", "RGBA"):
            return image.convert("RGBA" if has_alpha(image) else "RGB")
        return image
    if fmt is OutputFormat.PNG and image.mode == "CMYK":
        return image.convert("RGB")
    return image


def _tiff_options(image: Image.Image, quality: int) -> dict[str, Any]:
    """JPEG-compress opaque TIFFs at the requested quality; alpha stays lossless."""
    if image.mode in ("RGB", "L"):
        return {"compression": "jpeg", "quality": quality}
    return {}


class ImagePipeline:
    """Deferred, single-owner image pipeline.

    Configuration methods return self so calls can be chained. Invalid
    options raise EncodeError at configuration time; engine failures
    raise EncodeError when the pipeline is materialized.
    """

    def __init__(
        self,
        image: Image.Image,
        source: str,
        metadata: SourceMetadata | None = None,
        *,
        keep_metadata: bool = False,
    ) -> None:
        self._image = image
        self.source = source
        self._metadata = metadata or SourceMetadata()
        self._keep_metadata = keep_metadata
        self._steps: list[PipelineStep] = []
        self._output: OutputDirective | None = None

    @classmethod
    async def open(
        cls, source: SourceImage, *, keep_metadata: bool = False
    ) -> ImagePipeline:
        """Decode a source on the engine thread pool.

        Raises:
            DecodeError: If the source cannot be decoded.
        """
        image, metadata = await run_in_engine(decode_image, source)
        return cls(
            image, describe_source(source), metadata, keep_metadata=keep_metadata
        )

    def __repr__(self) -> str:
        fmt = self._output.format.value if self._output else None
        return (
            f"ImagePipeline(source={self.source!r}, steps={self.step_names}, "
            f"format={fmt!r})"
        )

    @property
    def source_size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    @property
    def output(self) -> OutputDirective | None:
        return self._output

    @property
    def keeps_metadata(self) -> bool:
        return self._keep_metadata

    def clone(self) -> ImagePipeline:
        """Return an independent pipeline over the same decoded source."""
        twin = ImagePipeline(
            self._image,
            self.source,
            self._metadata,
            keep_metadata=self._keep_metadata,
        )
        twin._steps = list(self._steps)
        twin._output = self._output
        return twin

    def with_metadata(self, keep: bool = True) -> ImagePipeline:
        """Keep (or drop) EXIF and ICC metadata in the output."""
        self._keep_metadata = keep
        return self

    def apply(
        self, name: str, func: Callable[[Image.Image], Image.Image]
    ) -> ImagePipeline:
        """Append an arbitrary pixel operation."""
        self._steps.append(PipelineStep(name, func))
        return self

    def auto_orient(self) -> ImagePipeline:
        """Rotate according to the source's EXIF orientation."""
        orientation = self._metadata.orientation
        return self.apply("auto_orient", lambda im: orient_image(im, orientation))

    def rotate(self, angle: float | None = None) -> ImagePipeline:
        """Rotate clockwise by angle; None auto-orients from EXIF."""
        if angle is None:
            return self.auto_orient()
        return self.apply(f"rotate:{angle:g}", lambda im: rotate_image(im, angle))

    def resize(
        self,
        width: int | None,
        height: int | None,
        *,
        position: str | int | None = None,
        fit: str | None = None,
        background: str | None = None,
    ) -> ImagePipeline:
        """Resize into a width x height box.

        Raises:
            EncodeError: If fit, position or background is invalid, or a
                dimension is not a positive integer.
        """
        for label, value in (("width", width), ("height", height)):
            if value is not None and (not isinstance(value, int) or value < 1):
                raise EncodeError(f"{label} must be a positive integer, got {value!r}")

        fit_mode = Fit.parse(fit)
        anchor = parse_position(position)
        fill = parse_color(background)

        if width is None and height is None:
            return self

        def step(image: Image.Image) -> Image.Image:
            return resize_image(
                image, width, height, fit=fit_mode, position=anchor, background=fill
            )

        return self.apply(f"resize:{width}x{height}:{fit_mode.value}", step)

    def grayscale(self) -> ImagePipeline:
        """Desaturate the image."""
        return self.apply("grayscale", to_grayscale)

    def to_format(self, fmt: OutputFormat, **options: Any) -> ImagePipeline:
        """Set the terminal output directive, replacing any earlier one."""
        self._output = OutputDirective(
            fmt, {k: v for k, v in options.items() if v is not None}
        )
        return self

    def png(self, compression_level: int = 9) -> ImagePipeline:
        return self.to_format(OutputFormat.PNG, compress_level=compression_level)

    def jpeg(self, quality: int = 80, progressive: bool = False) -> ImagePipeline:
        return self.to_format(
            OutputFormat.JPG, quality=quality, progressive=progressive
        )

    def webp(self, quality: int = 80) -> ImagePipeline:
        return self.to_format(OutputFormat.WEBP, quality=quality)

    def tiff(self, quality: int = 80) -> ImagePipeline:
        return self.to_format(OutputFormat.TIFF, quality=quality)

    def render(self) -> Image.Image:
        """Apply every pixel step to a private copy of the source."""
        image = self._image.copy()
        for step in self._steps:
            image = step.func(image)
        return image

    def _directive(self) -> OutputDirective:
        if self._output is not None:
            return self._output
        fmt = OutputFormat.from_pillow(self._image.format)
        if fmt is None:
            raise EncodeError(
                f"No output format staged and source format "
                f"{self._image.format!r} cannot be re-encoded"
            )
        return OutputDirective(fmt)

    def encode(self) -> bytes:
        """Render and encode synchronously.

        Raises:
            EncodeError: If rendering or encoding fails.
        """
        directive = self._directive()
        try:
            image = _prepare_for_format(self.render(), directive.format)
            # Some encoders fall back to metadata carried in image.info
            image.info.pop("icc_profile", None)
            image.info.pop("exif", None)
            save_kwargs = dict(directive.options)
            if directive.format is OutputFormat.TIFF and "quality" in save_kwargs:
                save_kwargs.update(_tiff_options(image, save_kwargs.pop("quality")))
            if self._keep_metadata:
                if self._metadata.icc_profile:
                    save_kwargs["icc_profile"] = self._metadata.icc_profile
                if self._metadata.exif and directive.format.supports_exif:
                    save_kwargs["exif"] = self._metadata.exif
            buffer = io.BytesIO()
            image.save(buffer, format=directive.format.pillow_format, **save_kwargs)
        except EncodeError:
            raise
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise EncodeError(
                f"{directive.format.value} encode of {self.source} failed: {e}"
            ) from e
        return buffer.getvalue()

    async def to_buffer(self) -> bytes:
        """Materialize the pipeline to encoded bytes."""
        return await run_in_engine(self.encode)

    async def to_file(self, path: Path | str) -> None:
        """Materialize the pipeline directly to a file.

        Raises:
            EncodeError: If encoding fails.
            OutputWriteError: If the file cannot be written.
        """
        data = await self.to_buffer()
        await run_in_engine(write_output, Path(path), data)


def write_output(path: Path, data: bytes) -> None:
    """Write output bytes, creating parent directories as needed.

    Raises:
        OutputWriteError: On permission, space or path errors.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e
