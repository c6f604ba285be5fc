"""Terminal encode strategy selection per output format.

PNG and WebP always go through an external re-compressor because the
native encoders compress poorly. JPEG does only when MozJPEG mode is on;
everything else is written by the native encoder.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from ito.compress import MozjpegCompressor, PngquantCompressor, WebpCompressor
from ito.config.models import ProcessingConfig
from ito.engine.formats import OutputFormat
from ito.engine.pipeline import ImagePipeline, write_output
from ito.transform.types import TransformRequest

logger = logging.getLogger(__name__)

# MozJPEG owns quality on its path, so its input should lose as little as possible
BASELINE_JPEG_QUALITY = 100


@dataclass(frozen=True)
class ProcessOptions:
    """Batch-wide processing options."""

    strip_metadata: bool = False
    """Omit embedded EXIF/ICC metadata from outputs."""

    use_mozjpeg: bool = False
    """Re-encode JPEG outputs with MozJPEG."""

    compress_timeout: int | None = None
    """Timeout in seconds per compressor run. None uses the default."""

    @classmethod
    def from_config(cls, config: ProcessingConfig) -> ProcessOptions:
        return cls(
            strip_metadata=config.strip_metadata,
            use_mozjpeg=config.use_mozjpeg,
            compress_timeout=config.compress_timeout,
        )


class EncodeStrategy(Enum):
    """How a transform's output bytes are produced."""

    PNGQUANT = "pngquant"
    MOZJPEG = "mozjpeg"
    CWEBP = "cwebp"
    NATIVE = "native"


def select_strategy(fmt: OutputFormat, use_mozjpeg: bool = False) -> EncodeStrategy:
    """Pick the terminal strategy for a format. First match wins."""
    if fmt is OutputFormat.PNG:
        return EncodeStrategy.PNGQUANT
    if use_mozjpeg and fmt is OutputFormat.JPG:
        return EncodeStrategy.MOZJPEG
    if fmt is OutputFormat.WEBP:
        return EncodeStrategy.CWEBP
    return EncodeStrategy.NATIVE


class FormatDispatcher:
    """Produce each transform's output file with the right encoder.

    One dispatcher serves a whole batch; it holds no per-transform state.
    Compressors can be injected for testing.
    """

    def __init__(
        self,
        options: ProcessOptions | None = None,
        *,
        pngquant: PngquantCompressor | None = None,
        mozjpeg: MozjpegCompressor | None = None,
        cwebp: WebpCompressor | None = None,
    ) -> None:
        self.options = options or ProcessOptions()
        timeout = self.options.compress_timeout
        self.pngquant = pngquant or PngquantCompressor(timeout)
        self.mozjpeg = mozjpeg or MozjpegCompressor(timeout)
        self.cwebp = cwebp or WebpCompressor(timeout)

    async def dispatch(
        self, pipeline: ImagePipeline, request: TransformRequest
    ) -> TransformRequest:
        """Encode a configured pipeline to request.output_path.

        Returns:
            The request, echoed to signal that the file exists.

        Raises:
            EncodeError: If materialization fails.
            CompressError: If the re-compressor fails.
            OutputWriteError: If the file cannot be written.
        """
        args = request.args
        strategy = select_strategy(args.output_format, self.options.use_mozjpeg)
        logger.debug("Encoding %s via %s", request.output_path, strategy.value)

        if strategy is EncodeStrategy.PNGQUANT:
            data = await pipeline.to_buffer()
            data = await self.pngquant.compress(
                data,
                quality=args.quality,
                speed=args.png_compression_speed,
                strip=self.options.strip_metadata,
            )
        elif strategy is EncodeStrategy.MOZJPEG:
            pipeline.jpeg(quality=BASELINE_JPEG_QUALITY, progressive=False)
            data = await pipeline.to_buffer()
            data = await self.mozjpeg.compress(
                data, quality=args.quality, progressive=args.jpeg_progressive
            )
        elif strategy is EncodeStrategy.CWEBP:
            data = await pipeline.to_buffer()
            data = await self.cwebp.compress(data, quality=args.quality)
        else:
            await pipeline.to_file(request.output_path)
            return request

        await asyncio.to_thread(write_output, request.output_path, data)
        return request


async def dispatch_transform(
    pipeline: ImagePipeline,
    request: TransformRequest,
    options: ProcessOptions | None = None,
) -> TransformRequest:
    """Encode one configured pipeline with a default dispatcher."""
    return await FormatDispatcher(options).dispatch(pipeline, request)
