"""External tool detection and version parsing.

This module locates the external re-compressors (pngquant, MozJPEG's
cjpeg, cwebp) and parses their versions for the doctor command.
"""

import logging
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for tool detection
from pathlib import Path

from ito.core.subprocess_utils import run_command
from ito.tools.models import ToolInfo, ToolSpec, ToolStatus

logger = logging.getLogger(__name__)

# Timeout for version detection commands (seconds)
DETECTION_TIMEOUT = 10

TOOL_SPECS: dict[str, ToolSpec] = {
    "pngquant": ToolSpec(
        name="pngquant",
        executable="pngquant",
        version_args=("--version",),
        install_hint="Install pngquant: https://pngquant.org/",
    ),
    "mozjpeg": ToolSpec(
        name="mozjpeg",
        executable="cjpeg",
        version_args=("-version",),
        install_hint=(
            "Install MozJPEG and put its cjpeg first on PATH or set "
            "ITO_MOZJPEG_PATH: https://github.com/mozilla/mozjpeg"
        ),
    ),
    "cwebp": ToolSpec(
        name="cwebp",
        executable="cwebp",
        version_args=("-version",),
        install_hint=(
            "Install libwebp tools: "
            "https://developers.google.com/speed/webp/download"
        ),
    ),
}


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles formats such as:
    - "2.17.0 (July 2022)" -> (2, 17, 0)
    - "mozjpeg version 4.1.1 (build 20230125)" -> (4, 1, 1)
    - "1.3.2" -> (1, 3, 2)

    Args:
        version_str: Version output to parse.

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    match = re.search(r"(\d+(?:\.\d+)+)", version_str)
    if not match:
        return None

    return tuple(int(p) for p in match.group(1).split("."))


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Executable name (e.g., "pngquant").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def detect_tool(name: str, configured_path: Path | None = None) -> ToolInfo:
    """Detect a compressor tool and its version.

    Args:
        name: Logical tool name, a key of TOOL_SPECS.
        configured_path: Optional configured path override.

    Returns:
        ToolInfo describing the tool's status.

    Raises:
        KeyError: If name is not a known tool.
    """
    spec = TOOL_SPECS[name]
    info = ToolInfo(name=name)

    path = find_tool(spec.executable, configured_path)
    if path is None:
        info.status_message = spec.install_hint
        return info

    info.path = path
    try:
        stdout, stderr, _ = run_command(
            [path, *spec.version_args], timeout=DETECTION_TIMEOUT
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        info.status = ToolStatus.ERROR
        info.status_message = str(e)
        return info

    # cjpeg and cwebp print their version on stderr
    output = (stdout or stderr).strip()
    first_line = output.splitlines()[0] if output else ""
    info.version = first_line or None
    info.version_tuple = parse_version_string(first_line)
    info.status = ToolStatus.AVAILABLE
    logger.debug("Detected %s at %s: %s", name, path, info.version)
    return info


def detect_all_tools(
    configured_paths: dict[str, Path | None] | None = None,
) -> dict[str, ToolInfo]:
    """Detect every known compressor tool.

    Args:
        configured_paths: Optional mapping of tool name to configured path.

    Returns:
        Mapping of tool name to ToolInfo.
    """
    configured_paths = configured_paths or {}
    return {name: detect_tool(name, configured_paths.get(name)) for name in TOOL_SPECS}
