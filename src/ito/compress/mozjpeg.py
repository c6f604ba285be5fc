"""JPEG re-compression with MozJPEG's cjpeg."""

from __future__ import annotations

from ito.compress.base import Compressor, validate_quality


class MozjpegCompressor(Compressor):
    """Re-encode JPEG buffers with MozJPEG.

    MozJPEG emits progressive JPEGs by default, so only the baseline case
    needs a flag.
    """

    tool = "mozjpeg"

    def build_args(self, quality: int, progressive: bool = True) -> list[str]:
        args = ["-quality", str(validate_quality(self.tool, quality))]
        if not progressive:
            args.append("-baseline")
        return args

    async def compress(
        self, data: bytes, *, quality: int, progressive: bool = True
    ) -> bytes:
        """Compress a JPEG buffer."""
        return await self._run(data, self.build_args(quality, progressive))
