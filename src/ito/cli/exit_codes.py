"""Centralized exit codes for all CLI commands."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for ito CLI commands."""

    SUCCESS = 0

    # At least one transform of the batch failed; the others were written
    PARTIAL_FAILURE = 1

    # The source could not be decoded; nothing was written
    DECODE_ERROR = 2

    MANIFEST_ERROR = 3

    TOOL_NOT_AVAILABLE = 4

    # A configuration value failed validation
    CONFIG_ERROR = 5
