"""External lossy re-compressors.

Each compressor takes an encoded buffer and returns a smaller one:

- pngquant.py: PNG palette quantization (PngquantCompressor)
- mozjpeg.py: JPEG re-encoding with MozJPEG (MozjpegCompressor)
- webp.py: WebP encoding with cwebp (WebpCompressor)
"""

from ito.compress.base import Compressor, validate_quality
from ito.compress.mozjpeg import MozjpegCompressor
from ito.compress.pngquant import PngquantCompressor, quality_range
from ito.compress.webp import WebpCompressor

__all__ = [
    "Compressor",
    "MozjpegCompressor",
    "PngquantCompressor",
    "WebpCompressor",
    "quality_range",
    "validate_quality",
]
