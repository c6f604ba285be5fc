"""Lossy PNG re-compression with pngquant."""

from __future__ import annotations

from ito.compress.base import Compressor, validate_quality
from ito.exceptions import CompressError

# pngquant exits with 99 when the result would fall below the minimum quality
EXIT_QUALITY_TOO_LOW = 99

# Width of the accepted quality range above the requested minimum
QUALITY_SPAN = 25


def quality_range(quality: int) -> str:
    """Build pngquant's min-max quality range, e.g. 40 -> "40-65"."""
    return f"{quality}-{min(quality + QUALITY_SPAN, 100)}"


class PngquantCompressor(Compressor):
    """Quantize PNG buffers to a palette within a quality range."""

    tool = "pngquant"

    def accept_returncode(self, returncode: int) -> bool:
        return returncode == EXIT_QUALITY_TOO_LOW

    def build_args(
        self,
        quality: int,
        speed: int | None = None,
        strip: bool = False,
    ) -> list[str]:
        """Build pngquant arguments.

        Raises:
            CompressError: If quality or speed is out of range.
        """
        quality = validate_quality(self.tool, quality)
        args = [f"--quality={quality_range(quality)}"]
        if speed:
            if not 1 <= speed <= 11:
                raise CompressError(self.tool, f"speed must be 1-11, got {speed}")
            args.extend(["--speed", str(speed)])
        if strip:
            args.append("--strip")
        # Read stdin, write stdout
        args.append("-")
        return args

    async def compress(
        self,
        data: bytes,
        *,
        quality: int,
        speed: int | None = None,
        strip: bool = False,
    ) -> bytes:
        """Compress a PNG buffer."""
        return await self._run(data, self.build_args(quality, speed, strip))
