"""Transform context for structured logging.

Each transform of a batch runs in its own asyncio task, and every task
gets a copy of the current contextvars. Setting the context inside the
task therefore tags that transform's log records without leaking into
its siblings.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)
_output: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "output", default=None
)


def set_transform_context(
    source: Path | str | None,
    output: Path | str | None = None,
) -> None:
    """Set the current transform context.

    Args:
        source: Source image being processed.
        output: Output path of the transform, or None at batch level.
    """
    _source.set(str(source) if source is not None else None)
    _output.set(str(output) if output is not None else None)


def clear_transform_context() -> None:
    """Clear the current transform context."""
    _source.set(None)
    _output.set(None)


@contextmanager
def transform_context(
    source: Path | str | None,
    output: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for transform processing context.

    Sets the context on entry and restores the previous one on exit.

    Example:
        with transform_context("in.jpg", "out/in-1a2b3.png"):
            logger.info("Processing")  # Tagged [in.jpg>in-1a2b3.png]
    """
    old_source = _source.get()
    old_output = _output.get()
    try:
        set_transform_context(source, output)
        yield
    finally:
        _source.set(old_source)
        _output.set(old_output)


def get_transform_context() -> tuple[str | None, str | None]:
    """Get current transform context.

    Returns:
        Tuple of (source, output), either may be None.
    """
    return _source.get(), _output.get()


class TransformContextFilter(logging.Filter):
    """Logging filter that injects transform context into log records.

    Adds source and output attributes to each LogRecord. For text format,
    also adds a compact transform_tag like [photo.jpg>photo-1a2b3.png].
    """

    def filter(self, record: logging.LogRecord) -> bool:
        source, output = get_transform_context()

        record.source = source
        record.output = output

        if source:
            source_name = Path(source).name
            if output:
                record.transform_tag = f"[{source_name}>{Path(output).name}] "
            else:
                record.transform_tag = f"[{source_name}] "
        else:
            record.transform_tag = ""

        return True
