"""Subprocess utilities for external tool invocation.

This module provides the subprocess wrappers used across the codebase for
consistent timeout handling, encoding, and logging when invoking external
tools like pngquant, cjpeg and cwebp.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for compressor invocation
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _command_name(str_args: list[str]) -> str:
    return str_args[0].split("/")[-1] if str_args else "unknown"


def run_command(
    args: list[str | Path],
    timeout: int = 120,
    errors: str = "replace",
    **kwargs: Any,
) -> tuple[str, str, int]:
    """Run external command and capture text output.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds (default 120).
        errors: Error handling mode for text decoding (default "replace").
        **kwargs: Additional subprocess.run arguments.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If command times out.

    Example:
        >>> stdout, stderr, rc = run_command(["pngquant", "--version"])
        >>> if rc == 0:
        ...     print(f"pngquant version: {stdout}")
    """
    str_args = [str(arg) for arg in args]
    command_name = _command_name(str_args)

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )

    start_time = time.monotonic()

    try:
        result = subprocess.run(  # nosec B603 - caller validates args
            str_args,
            capture_output=True,
            text=True,
            errors=errors,
            timeout=timeout,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ds: %s",
            timeout,
            " ".join(str_args[:3]) + ("..." if len(str_args) > 3 else ""),
            extra={"command": command_name, "timeout_seconds": timeout},
        )
        raise

    elapsed = time.monotonic() - start_time
    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": result.returncode,
        },
    )

    return result.stdout or "", result.stderr or "", result.returncode


def run_filter(
    args: list[str | Path],
    data: bytes,
    timeout: int = 120,
) -> tuple[bytes, str, int]:
    """Pipe bytes through an external command.

    The command reads ``data`` on stdin and writes its result to stdout,
    the way buffer-in/buffer-out image compressors work.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        data: Bytes written to the command's stdin.
        timeout: Timeout in seconds (default 120).

    Returns:
        Tuple of (stdout bytes, decoded stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If command times out.
    """
    str_args = [str(arg) for arg in args]
    command_name = _command_name(str_args)

    logger.debug(
        "Filtering %d bytes through: %s",
        len(data),
        " ".join(str_args),
        extra={"command": command_name, "input_bytes": len(data)},
    )

    start_time = time.monotonic()

    try:
        result = subprocess.run(  # nosec B603 - caller validates args
            str_args,
            input=data,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ds: %s",
            timeout,
            command_name,
            extra={"command": command_name, "timeout_seconds": timeout},
        )
        raise

    elapsed = time.monotonic() - start_time
    stdout = result.stdout or b""
    logger.debug(
        "Filter completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": result.returncode,
            "output_bytes": len(stdout),
        },
    )

    stderr = (result.stderr or b"").decode("utf-8", errors="replace")
    return stdout, stderr, result.returncode
