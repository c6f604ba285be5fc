"""ito doctor command for checking compressor availability.

PNG and WebP outputs always go through pngquant and cwebp, so those two
are required. MozJPEG is required only when it is enabled.
"""

import sys

import click

from ito.cli import get_cli_config
from ito.cli.exit_codes import ExitCode
from ito.cli.output import emit_json, format_status
from ito.tools import TOOL_SPECS, ToolInfo, detect_all_tools, refresh_tools


def _format_version(version: str | None) -> str:
    """Format version for display."""
    return version if version else "not found"


def _required_tools(use_mozjpeg: bool) -> set[str]:
    required = {"pngquant", "cwebp"}
    if use_mozjpeg:
        required.add("mozjpeg")
    return required


def _output_json(tools: dict[str, ToolInfo], required: set[str]) -> None:
    emit_json(
        {
            name: {
                "status": info.status.value,
                "version": info.version,
                "path": str(info.path) if info.path else None,
                "required": name in required,
                "message": info.status_message,
            }
            for name, info in tools.items()
        }
    )


@click.command("doctor")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show tool paths.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
def doctor_command(verbose: bool, json_output: bool) -> None:
    """Check external compressor availability.

    Exit codes:
      0 - All required tools available
      4 - A required tool is missing
    """
    config = get_cli_config(click.get_current_context())
    refresh_tools()
    tools = detect_all_tools(
        {name: getattr(config.tools, name, None) for name in TOOL_SPECS}
    )
    required = _required_tools(config.processing.use_mozjpeg)
    missing = [name for name in required if not tools[name].is_available()]

    if json_output:
        _output_json(tools, required)
    else:
        click.echo("ito External Tool Health Check")
        click.echo("=" * 40)
        for name, info in tools.items():
            status = format_status(info.is_available())
            version = _format_version(info.version)
            path_info = f" ({info.path})" if info.path and verbose else ""
            label = name if name in required else f"{name} (optional)"
            click.echo(f"  {status} {label}: {version}{path_info}")
            if not info.is_available() and info.status_message:
                click.echo(f"    └─ {info.status_message}")
        click.echo()

    if missing:
        if not json_output:
            click.echo(f"Missing required tools: {', '.join(sorted(missing))}")
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
    sys.exit(ExitCode.SUCCESS)
