"""Batch manifest loading.

A manifest is a YAML mapping listing the transforms to run against one
source. Batch-wide options in the manifest override configuration but
are themselves overridden by CLI flags.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ito.engine.pipeline import SourceImage
from ito.exceptions import ManifestError
from ito.manifest.models import ManifestModel
from ito.transform.digest import dedupe_transforms, output_path_for
from ito.transform.types import TransformRequest

logger = logging.getLogger(__name__)


def load_manifest(manifest_path: Path) -> ManifestModel:
    """Load and validate a manifest from a YAML file.

    Args:
        manifest_path: Path to the YAML manifest.

    Returns:
        Validated ManifestModel.

    Raises:
        ManifestError: If the file is missing, not YAML, or invalid.
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ManifestError(f"Manifest file not found: {manifest_path}") from None
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise ManifestError("Manifest file is empty")

    if not isinstance(data, dict):
        raise ManifestError("Manifest file must be a YAML mapping")

    return load_manifest_from_dict(data)


def load_manifest_from_dict(data: dict[str, Any]) -> ManifestModel:
    """Validate a manifest from a dictionary.

    Raises:
        ManifestError: If the manifest data is invalid.
    """
    try:
        return ManifestModel.model_validate(data)
    except ValidationError as e:
        message, field = _format_validation_error(e)
        raise ManifestError(message, field=field) from e


def build_requests(
    manifest: ManifestModel,
    source: SourceImage,
    output_dir: Path | None = None,
) -> list[TransformRequest]:
    """Turn manifest transforms into unique transform requests.

    Transforms with an explicit output are placed relative to the output
    directory; the rest are named after the source and their argument
    fingerprint.

    Args:
        manifest: Validated manifest.
        source: Source image the manifest applies to.
        output_dir: Overrides manifest.output_dir. Falls back to the
            current directory when neither is set.
    """
    directory = Path(output_dir or manifest.output_dir or ".")
    requests = []
    for transform in manifest.transforms:
        args = transform.to_args()
        if transform.output is not None:
            path = directory / transform.output
        else:
            path = output_path_for(source, args, directory)
        requests.append(TransformRequest(path, args))

    unique = dedupe_transforms(requests)
    if len(unique) < len(requests):
        logger.info("Collapsed %d duplicate transforms", len(requests) - len(unique))
    return unique


def _format_validation_error(error: ValidationError) -> tuple[str, str | None]:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Manifest validation failed: {loc}: {msg}", loc
        return f"Manifest validation failed: {msg}", None
    return f"Manifest validation failed: {error}", None
