"""Apply command-line logging overrides on top of the loaded configuration."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from ito.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return base with every override that is not None applied.

    Raises:
        ValueError: If an override fails LoggingConfig validation.
    """
    overrides = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    return dataclasses.replace(
        base, **{key: value for key, value in overrides.items() if value is not None}
    )


def configure_logging_from_cli(
    *,
    config_path: Path | None = None,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
) -> None:
    """Configure the root logger from the config file, env and CLI flags.

    A log file given on the command line also keeps stderr output, so
    progress stays visible while it is being recorded.
    """
    from ito.config.loader import get_config
    from ito.logging import configure_logging

    config = get_config(config_path)
    configure_logging(
        build_logging_config(
            config.logging,
            level=level,
            file=file,
            format=format,
            include_stderr=True if file is not None else None,
        )
    )
