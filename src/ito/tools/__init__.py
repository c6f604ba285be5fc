"""External compressor tool detection and resolution.

Tool paths are resolved from configuration (config file or ITO_*_PATH
environment variables) with a fallback to the system PATH.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ito.exceptions import CompressError
from ito.tools.detection import (
    TOOL_SPECS,
    detect_all_tools,
    detect_tool,
    find_tool,
    parse_version_string,
)
from ito.tools.models import ToolInfo, ToolSpec, ToolStatus

if TYPE_CHECKING:
    from ito.config.models import ToolPathsConfig

# Resolved executable paths (lazy-loaded, thread-safe)
_resolved: dict[str, Path] = {}
_resolve_lock = threading.Lock()

# Paths set by configure_tools(); None means read the global configuration
_tool_paths: ToolPathsConfig | None = None


def configure_tools(paths: ToolPathsConfig | None) -> None:
    """Use explicit tool paths instead of the global configuration."""
    global _tool_paths
    with _resolve_lock:
        _tool_paths = paths
        _resolved.clear()


def require_tool(name: str) -> Path:
    """Get path to a required compressor, raising if not available.

    Configured paths take precedence over PATH lookup.

    Args:
        name: Logical tool name ("pngquant", "mozjpeg", "cwebp").

    Returns:
        Path to the tool executable.

    Raises:
        CompressError: If the tool cannot be found.
    """
    if name in _resolved:
        return _resolved[name]

    with _resolve_lock:
        if name in _resolved:
            return _resolved[name]

        spec = TOOL_SPECS[name]
        paths = _tool_paths
        if paths is None:
            from ito.config import get_config

            paths = get_config().tools
        configured = getattr(paths, name, None)
        path = find_tool(spec.executable, configured)
        if path is None:
            raise CompressError(
                name, f"Required tool not available. {spec.install_hint}"
            )
        _resolved[name] = path
        return path


def refresh_tools() -> None:
    """Forget resolved and explicitly configured tool paths.

    Call this if tool paths or availability may have changed.
    """
    global _tool_paths
    with _resolve_lock:
        _tool_paths = None
        _resolved.clear()


__all__ = [
    "TOOL_SPECS",
    "ToolInfo",
    "ToolSpec",
    "ToolStatus",
    "configure_tools",
    "detect_all_tools",
    "detect_tool",
    "find_tool",
    "parse_version_string",
    "refresh_tools",
    "require_tool",
]
