"""Custom exceptions for image transform operations.

Decode failures are fatal for every transform sharing a source. Encode,
compress and write failures are fatal only for the transform that raised
them; sibling transforms of the same batch keep running.
"""

from pathlib import Path


class ItoError(Exception):
    """Base exception for image transform errors.

    All ito exceptions except OutputWriteError inherit from this class,
    allowing callers to catch them with a single except clause.
    """


class DecodeError(ItoError):
    """Raised when a source image cannot be opened or decoded.

    Attributes:
        source: Description of the failing source (path or "<bytes>").
        reason: Underlying failure message.
    """

    def __init__(self, source: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            source: Description of the failing source.
            reason: Underlying failure message, if known.
        """
        self.source = source
        self.reason = reason
        message = f"Failed to process image {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EncodeError(ItoError):
    """Raised when a pipeline cannot be configured or materialized.

    Covers invalid resize/rotate options and engine failures while
    encoding pixels to a target format.
    """

    def __init__(self, reason: str, output_path: Path | str | None = None) -> None:
        self.reason = reason
        self.output_path = Path(output_path) if output_path is not None else None
        if output_path is not None:
            super().__init__(f"Cannot encode {output_path}: {reason}")
        else:
            super().__init__(reason)


class CompressError(ItoError):
    """Raised when an external re-compressor fails or is unavailable.

    Attributes:
        tool: Name of the compressor tool (e.g., "pngquant").
        reason: Failure description (stderr excerpt or install hint).
        returncode: Process return code, None if the tool never ran.
    """

    def __init__(
        self, tool: str, reason: str, returncode: int | None = None
    ) -> None:
        self.tool = tool
        self.reason = reason
        self.returncode = returncode
        if returncode is not None:
            super().__init__(f"{tool} failed with exit code {returncode}: {reason}")
        else:
            super().__init__(f"{tool} failed: {reason}")


class OutputWriteError(OSError):
    """Raised when an output file cannot be written.

    Subclasses OSError so callers handling filesystem errors generically
    still catch it.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")


class ManifestError(ItoError):
    """Raised when a batch manifest is missing or invalid."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)
