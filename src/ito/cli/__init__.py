"""Command-line interface for ito."""

import logging
from pathlib import Path

import click

from ito.cli.exit_codes import ExitCode
from ito.cli.output import error_exit
from ito.config import ItoConfig, get_config

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Set up logging once per process; later calls are ignored."""
    global _logging_configured
    if _logging_configured:
        return

    from ito.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


def _load_config(config_path: Path | None) -> ItoConfig:
    """Build the configuration, exiting with CONFIG_ERROR on bad values."""
    try:
        return get_config(config_path)
    except (ValueError, TypeError) as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)


def get_cli_config(ctx: click.Context) -> ItoConfig:
    """Effective configuration for the running command.

    Honours the group's --config option; falls back to the default
    config location outside a CLI invocation.
    """
    obj = ctx.find_object(dict) or {}
    return _load_config(obj.get("config_path"))


@click.group()
@click.version_option(package_name="ito")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of ~/.ito/config.toml.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file.",
)
@click.option("--log-json", is_flag=True, help="Use JSON log format.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Resize, re-encode and compress images from a YAML manifest."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _load_config(config_path)
    _configure_logging(config_path, log_level, log_file, log_json)


def _register_commands():
    # Imported late: command modules import get_cli_config from here
    from ito.cli.digest import digest_command
    from ito.cli.doctor import doctor_command
    from ito.cli.process import process_command

    main.add_command(digest_command)
    main.add_command(doctor_command)
    main.add_command(process_command)


_register_commands()
