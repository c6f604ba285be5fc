"""CLI command for running a manifest of transforms against one image.

The source is decoded once and every transform of the manifest runs
concurrently. A failing transform does not stop the others.
"""

import asyncio
import logging
import sys
import time
from pathlib import Path

import click

from ito.cli import get_cli_config
from ito.cli.exit_codes import ExitCode
from ito.cli.output import emit_json, error_exit, format_outcome, outcome_to_dict
from ito.engine.runtime import configure_engine
from ito.exceptions import DecodeError, ManifestError
from ito.executor import ProcessOptions, process_batch
from ito.manifest import build_requests, load_manifest
from ito.tools import configure_tools

logger = logging.getLogger(__name__)


def _resolve_flag(cli_value: bool, manifest_value: bool | None, default: bool) -> bool:
    """CLI flag, then manifest value, then configuration."""
    if cli_value:
        return True
    if manifest_value is not None:
        return manifest_value
    return default


@click.command("process")
@click.argument(
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--manifest",
    "-m",
    "manifest_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="YAML manifest listing the transforms to run.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for outputs (overrides the manifest's output_dir).",
)
@click.option(
    "--strip-metadata",
    is_flag=True,
    default=False,
    help="Omit EXIF and ICC metadata from outputs.",
)
@click.option(
    "--mozjpeg",
    "use_mozjpeg",
    is_flag=True,
    default=False,
    help="Re-encode JPEG outputs with MozJPEG.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
def process_command(
    source: Path,
    manifest_path: Path,
    output_dir: Path | None,
    strip_metadata: bool,
    use_mozjpeg: bool,
    json_output: bool,
) -> None:
    """Produce every output variant listed in a manifest from SOURCE.

    Exit codes:
      0 - All transforms succeeded
      1 - At least one transform failed
      2 - SOURCE could not be decoded
      3 - The manifest is invalid
    """
    config = get_cli_config(click.get_current_context())

    try:
        manifest = load_manifest(manifest_path)
    except ManifestError as e:
        error_exit(str(e), ExitCode.MANIFEST_ERROR, json_output)

    options = ProcessOptions(
        strip_metadata=_resolve_flag(
            strip_metadata, manifest.strip_metadata, config.processing.strip_metadata
        ),
        use_mozjpeg=_resolve_flag(
            use_mozjpeg, manifest.use_mozjpeg, config.processing.use_mozjpeg
        ),
        compress_timeout=config.processing.compress_timeout,
    )
    requests = build_requests(manifest, source, output_dir)

    configure_engine(config.engine.concurrency)
    configure_tools(config.tools)
    logger.info(
        "Processing %s: %d transforms (strip_metadata=%s, mozjpeg=%s)",
        source,
        len(requests),
        options.strip_metadata,
        options.use_mozjpeg,
    )

    batch_start_time = time.time()
    try:
        outcomes = asyncio.run(process_batch(source, requests, options))
    except DecodeError as e:
        error_exit(str(e), ExitCode.DECODE_ERROR, json_output)
    batch_duration = time.time() - batch_start_time

    fail_count = sum(1 for outcome in outcomes if not outcome.ok)
    success_count = len(outcomes) - fail_count

    if json_output:
        emit_json(
            {
                "source": str(source),
                "summary": {
                    "total": len(outcomes),
                    "success": success_count,
                    "failed": fail_count,
                    "duration_seconds": round(batch_duration, 2),
                },
                "results": [outcome_to_dict(o) for o in outcomes],
            }
        )
    else:
        for outcome in outcomes:
            click.echo(format_outcome(outcome))
        click.echo(
            f"Processed {len(outcomes)} transform(s): "
            f"{success_count} ok, {fail_count} failed in {batch_duration:.1f}s"
        )

    if fail_count > 0:
        sys.exit(ExitCode.PARTIAL_FAILURE)
    sys.exit(ExitCode.SUCCESS)
