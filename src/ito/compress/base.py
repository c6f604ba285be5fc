"""Base class for external buffer-in/buffer-out re-compressors.

Provides lazy tool path resolution, timeout handling and uniform error
mapping. Subprocesses run on a worker thread so the event loop keeps
driving sibling transforms while a compressor works.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess  # nosec B404 - needed for TimeoutExpired
from abc import ABC
from pathlib import Path

from ito.core.subprocess_utils import run_filter
from ito.exceptions import CompressError
from ito.tools import require_tool

logger = logging.getLogger(__name__)


def validate_quality(tool: str, quality: int | None) -> int:
    """Check a 0-100 quality value.

    Raises:
        CompressError: If quality is missing or out of range.
    """
    if quality is None or isinstance(quality, bool) or not 0 <= quality <= 100:
        raise CompressError(tool, f"quality must be between 0 and 100, got {quality!r}")
    return int(quality)


class Compressor(ABC):
    """Base class for compressors backed by an external executable.

    Subclasses set ``tool`` to a key of ito.tools.TOOL_SPECS and expose a
    ``compress`` coroutine that builds arguments and calls ``_run``.
    """

    tool: str = ""
    DEFAULT_TIMEOUT: int = 120

    def __init__(self, timeout: int | None = None) -> None:
        """Initialize the compressor.

        Args:
            timeout: Timeout in seconds per run. None uses DEFAULT_TIMEOUT.
        """
        self._tool_path: Path | None = None
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

    @property
    def tool_path(self) -> Path:
        """Path to the executable, verifying availability.

        Raises:
            CompressError: If the tool is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool(self.tool)
        return self._tool_path

    def accept_returncode(self, returncode: int) -> bool:
        """Return True if a non-zero exit should yield the input unchanged."""
        return False

    async def _run(self, data: bytes, args: list[str]) -> bytes:
        """Pipe data through the tool.

        Raises:
            CompressError: On timeout, launch failure, non-zero exit or
                empty output.
        """
        if not data:
            raise CompressError(self.tool, "empty input buffer")

        cmd: list[str | Path] = [self.tool_path, *args]
        try:
            stdout, stderr, returncode = await asyncio.to_thread(
                run_filter, cmd, data, self._timeout
            )
        except subprocess.TimeoutExpired as e:
            raise CompressError(
                self.tool, f"timed out after {self._timeout}s"
            ) from e
        except OSError as e:
            raise CompressError(self.tool, str(e)) from e

        if returncode != 0:
            if self.accept_returncode(returncode):
                logger.info(
                    "%s exited with %d, keeping the original encoding",
                    self.tool,
                    returncode,
                )
                return data
            raise CompressError(
                self.tool, stderr.strip() or "no diagnostic output", returncode
            )
        if not stdout:
            raise CompressError(self.tool, "produced no output")

        logger.debug(
            "%s compressed %d -> %d bytes", self.tool, len(data), len(stdout)
        )
        return stdout
