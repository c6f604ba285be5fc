"""Core utilities shared across ito modules."""

from ito.core.subprocess_utils import run_command, run_filter

__all__ = [
    "run_command",
    "run_filter",
]
