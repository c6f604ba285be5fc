"""Process-wide engine initialization.

Decode and encode work runs on a dedicated thread pool so that many
transforms can be materialized concurrently without blocking the event
loop. The pool is sized once per process by configure_engine(); the
engine configures itself with defaults on first use if nobody did.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EngineSettings:
    """Effective engine settings for this process."""

    concurrency: int
    """Number of worker threads used for decode and encode."""


_settings: EngineSettings | None = None
_executor: ThreadPoolExecutor | None = None
_engine_lock = threading.Lock()


def configure_engine(concurrency: int | None = None) -> EngineSettings:
    """Initialize the engine thread pool.

    Only the first call has an effect. Later calls return the settings
    already in force; asking for a different concurrency logs a warning.

    Args:
        concurrency: Worker thread count. None uses the CPU count.

    Returns:
        The engine settings in force.

    Raises:
        ValueError: If concurrency is less than 1.
    """
    global _settings, _executor

    if concurrency is not None and concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    with _engine_lock:
        if _settings is not None:
            if concurrency is not None and concurrency != _settings.concurrency:
                logger.warning(
                    "Engine already configured with concurrency=%d; "
                    "ignoring request for %d",
                    _settings.concurrency,
                    concurrency,
                )
            return _settings

        workers = concurrency or os.cpu_count() or 1
        _executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="ito-engine"
        )
        _settings = EngineSettings(concurrency=workers)
        logger.debug("Engine configured with %d worker threads", workers)
        return _settings


def get_engine_settings() -> EngineSettings | None:
    """Return the engine settings, or None if not configured yet."""
    return _settings


def shutdown_engine() -> None:
    """Tear down the engine thread pool.

    The next engine call reconfigures it. Primarily useful for testing.
    """
    global _settings, _executor
    with _engine_lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
        _executor = None
        _settings = None


async def run_in_engine(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking engine call on the engine thread pool.

    Args:
        func: Blocking callable (decode, render, encode).
        *args: Positional arguments for func.
        **kwargs: Keyword arguments for func.

    Returns:
        The callable's result.
    """
    if _executor is None:
        configure_engine()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _executor, functools.partial(func, *args, **kwargs)
    )
