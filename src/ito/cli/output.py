"""Text and JSON rendering shared by the CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from ito.cli.exit_codes import ExitCode
from ito.transform.types import TransformOutcome


def emit_json(payload: Any, *, err: bool = False) -> None:
    """Print a JSON document to stdout, or stderr with err=True."""
    click.echo(json.dumps(payload, indent=2, default=str), err=err)


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Report a fatal error on stderr and exit with code."""
    if json_output:
        name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"
        emit_json(
            {"status": "failed", "error": {"code": name, "message": message}},
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def format_status(ok: bool) -> str:
    return "✓" if ok else "✗"


def outcome_to_dict(outcome: TransformOutcome) -> dict[str, Any]:
    """JSON form of one transform's outcome."""
    data: dict[str, Any] = {
        "output": str(outcome.request.output_path),
        "format": outcome.request.args.to_format,
        "status": "ok" if outcome.ok else "failed",
    }
    if outcome.error is not None:
        data["error"] = {
            "type": type(outcome.error).__name__,
            "message": str(outcome.error),
        }
    return data


def format_outcome(outcome: TransformOutcome) -> str:
    """One indented status line, with the error when the transform failed."""
    line = f"  {format_status(outcome.ok)} {outcome.request.output_path}"
    if outcome.error is not None:
        line = f"{line}: {outcome.error}"
    return line
