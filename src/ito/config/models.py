"""Configuration data models.

This module defines dataclasses for ito configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")


@dataclass
class ToolPathsConfig:
    """Configuration for external compressor paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    pngquant: Path | None = None
    mozjpeg: Path | None = None
    cwebp: Path | None = None


@dataclass
class EngineConfig:
    """Configuration for the decode/encode engine."""

    # Worker threads for decode and encode (None = CPU count)
    concurrency: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.concurrency is not None and self.concurrency < 1:
            raise ValueError(
                f"concurrency must be a positive integer, got {self.concurrency}"
            )


@dataclass
class ProcessingConfig:
    """Default options for batch processing."""

    # Omit embedded metadata (EXIF, ICC) from outputs
    strip_metadata: bool = False

    # Route JPEG outputs through MozJPEG instead of the native encoder
    use_mozjpeg: bool = False

    # Timeout in seconds for a single external compressor run
    compress_timeout: int = 120

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.compress_timeout <= 3600:
            raise ValueError(
                "compress_timeout must be between 1 and 3600 seconds, "
                f"got {self.compress_timeout}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in LOG_LEVELS:
            raise ValueError(f"level must be one of {LOG_LEVELS}, got {self.level}")
        if self.format.lower() not in LOG_FORMATS:
            raise ValueError(f"format must be one of {LOG_FORMATS}, got {self.format}")


@dataclass
class ItoConfig:
    """Top-level ito configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
