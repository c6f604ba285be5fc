"""WebP re-compression with cwebp."""

from __future__ import annotations

from ito.compress.base import Compressor, validate_quality


class WebpCompressor(Compressor):
    """Re-encode image buffers as WebP."""

    tool = "cwebp"

    def build_args(self, quality: int) -> list[str]:
        return [
            "-quiet",
            "-q",
            str(validate_quality(self.tool, quality)),
            "-o",
            "-",
            "--",
            "-",
        ]

    async def compress(self, data: bytes, *, quality: int) -> bytes:
        """Compress a buffer to WebP."""
        return await self._run(data, self.build_args(quality))
