"""Conditional step composition.

Turns TransformArgs into an ordered sequence of pipeline steps. The
order matters: orientation and geometry come first, colour changes
next, explicit rotation after the image is desaturated, and duotone
last so it sees the final geometry and colour.
"""

from __future__ import annotations

import logging
import math

from ito.engine.duotone import apply_duotone
from ito.engine.formats import OutputFormat
from ito.engine.pipeline import ImagePipeline
from ito.transform.types import TransformArgs

logger = logging.getLogger(__name__)


def round_dimension(value: float | None) -> int | None:
    """Round a requested dimension to whole pixels, half up.

    None and 0 mean "not constrained".
    """
    if not value:
        return None
    return int(math.floor(value + 0.5))


def stage_format(
    pipeline: ImagePipeline,
    args: TransformArgs,
    fmt: OutputFormat,
    *,
    use_mozjpeg: bool = False,
) -> ImagePipeline:
    """Stage the encoder directive for the terminal format only.

    JPEG is left unstaged when MozJPEG will re-encode it; the dispatcher
    stages a baseline encode for that path.
    """
    if fmt is OutputFormat.PNG:
        return pipeline.png(compression_level=args.png_compression_level)
    if fmt is OutputFormat.WEBP:
        return pipeline.webp(quality=args.quality)
    if fmt is OutputFormat.TIFF:
        return pipeline.tiff(quality=args.quality)
    if fmt is OutputFormat.JPG:
        if use_mozjpeg:
            return pipeline
        return pipeline.jpeg(quality=args.quality, progressive=args.jpeg_progressive)
    return pipeline.to_format(fmt)


def compose_pipeline(
    pipeline: ImagePipeline,
    args: TransformArgs,
    *,
    use_mozjpeg: bool = False,
) -> ImagePipeline:
    """Configure a pipeline for one transform.

    Args:
        pipeline: Handle owned by this transform.
        args: Transform arguments.
        use_mozjpeg: Whether JPEG output is re-encoded by MozJPEG.

    Returns:
        The configured pipeline, ready for terminal encoding.

    Raises:
        EncodeError: If the format, geometry options or duotone colours
            are invalid.
    """
    fmt = args.output_format

    if not args.rotate:
        pipeline.auto_orient()

    pipeline.resize(
        round_dimension(args.width),
        round_dimension(args.height),
        position=args.crop_focus,
        fit=args.fit,
        background=args.background,
    )

    stage_format(pipeline, args, fmt, use_mozjpeg=use_mozjpeg)

    if args.grayscale:
        pipeline.grayscale()

    if args.rotate:
        pipeline.rotate(args.rotate)

    if args.duotone:
        pipeline = apply_duotone(args.duotone, fmt, pipeline)

    logger.debug("Composed pipeline: %s", pipeline.step_names)
    return pipeline
