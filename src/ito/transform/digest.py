"""Short, deterministic fingerprints of transform arguments.

Only arguments that change the output bytes take part in the digest, so
two requests that would produce identical files share a fingerprint and
can be written once. Five hex characters keep generated filenames short;
equal digests mean "almost certainly identical", not a proof.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ito.transform.types import (
    TransformArgs,
    TransformRequest,
    normalize_key,
)

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 5

# Arguments that affect the output of a transform
ARGS_WHITELIST: frozenset[str] = frozenset(
    {
        "height",
        "width",
        "crop_focus",
        "to_format",
        "png_compression_level",
        "quality",
        "jpeg_progressive",
        "grayscale",
        "rotate",
        "duotone",
        "fit",
        "background",
    }
)


def _canonical(value: Any) -> Any:
    """Normalize a value so equal arguments serialize identically."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_canonical(v) for v in value]
    if hasattr(value, "as_dict"):
        return _canonical(value.as_dict())
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return value


def filter_args(args: TransformArgs | Mapping[str, Any]) -> dict[str, Any]:
    """Reduce arguments to the subset that takes part in the digest.

    Drops non-whitelisted keys and falsy values, then prunes arguments
    belonging to the other lossy format: PNG options for JPEG output and
    JPEG options for PNG output.
    """
    data = args.as_dict() if isinstance(args, TransformArgs) else args
    normalized = {normalize_key(str(k)): v for k, v in data.items()}
    to_format = str(normalized.get("to_format") or "").casefold()

    filtered: dict[str, Any] = {}
    for key, value in normalized.items():
        if not value:
            continue
        if to_format.startswith("jp") and "png" in key:
            continue
        if to_format.startswith("png") and key.startswith("jp"):
            continue
        if key in ARGS_WHITELIST:
            filtered[key] = _canonical(value)
    return filtered


def create_args_digest(args: TransformArgs | Mapping[str, Any]) -> str:
    """Fingerprint transform arguments.

    Args:
        args: TransformArgs or a flat mapping (snake_case or camelCase keys).

    Returns:
        The last five hex characters of the MD5 of the canonical JSON of
        the filtered arguments.
    """
    filtered = filter_args(args)
    canonical = json.dumps(filtered, sort_keys=True, separators=(",", ":"))
    digest = hashlib.md5(canonical.encode("utf-8"), usedforsecurity=False).hexdigest()
    return digest[-DIGEST_LENGTH:]


def output_path_for(
    source: str | os.PathLike | bytes,
    args: TransformArgs,
    output_dir: Path,
) -> Path:
    """Name an output file after its source and argument fingerprint.

    Example:
        output_path_for("photos/cat.jpg", TransformArgs("png", width=500), Path("out"))
        # -> out/cat-<digest>.png

    Raises:
        EncodeError: If args.to_format is not supported.
    """
    stem = "image" if isinstance(source, bytes | bytearray) else Path(source).stem
    extension = args.output_format.extension
    return Path(output_dir) / f"{stem}-{create_args_digest(args)}.{extension}"


def dedupe_transforms(
    requests: Iterable[TransformRequest],
) -> list[TransformRequest]:
    """Drop requests that repeat an earlier output path and fingerprint.

    Order of first occurrence is kept. Requests sharing an output path but
    not a fingerprint are kept and logged, since one would overwrite the
    other.
    """
    seen: dict[Path, str] = {}
    unique: list[TransformRequest] = []
    for request in requests:
        digest = create_args_digest(request.args)
        previous = seen.get(request.output_path)
        if previous == digest:
            logger.debug("Skipping duplicate transform %s", request.output_path)
            continue
        if previous is not None:
            logger.warning(
                "Transforms with different arguments share output path %s",
                request.output_path,
            )
        seen[request.output_path] = digest
        unique.append(request)
    return unique
