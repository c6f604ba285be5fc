"""Structured logging module for ito.

Provides configurable logging with JSON format support and file rotation.
Includes transform context support so log lines from concurrently running
transforms stay attributable.
"""

from ito.logging.config import configure_logging
from ito.logging.context import (
    TransformContextFilter,
    clear_transform_context,
    get_transform_context,
    set_transform_context,
    transform_context,
)
from ito.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "TransformContextFilter",
    "clear_transform_context",
    "configure_logging",
    "get_transform_context",
    "set_transform_context",
    "transform_context",
]
