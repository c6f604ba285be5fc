"""Data models for external compressor tools."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ToolStatus(Enum):
    """Status of an external tool."""

    AVAILABLE = "available"  # Tool found and version detected
    MISSING = "missing"  # Tool not found in PATH or configured location
    ERROR = "error"  # Tool found but detection failed


@dataclass(frozen=True)
class ToolSpec:
    """Static description of a compressor tool.

    Attributes:
        name: Logical tool name used in configuration ("mozjpeg").
        executable: Executable looked up on PATH ("cjpeg").
        version_args: Arguments that make the tool print its version.
        install_hint: Shown when the tool is missing.
    """

    name: str
    executable: str
    version_args: tuple[str, ...]
    install_hint: str


@dataclass
class ToolInfo:
    """Detected information for an external tool."""

    name: str
    path: Path | None = None
    version: str | None = None
    version_tuple: tuple[int, ...] | None = None
    status: ToolStatus = ToolStatus.MISSING
    status_message: str | None = None

    def is_available(self) -> bool:
        """Return True if the tool is available and usable."""
        return self.status == ToolStatus.AVAILABLE
