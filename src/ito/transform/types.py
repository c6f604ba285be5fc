"""Transform data types.

This module defines the arguments describing one output variant, the
request pairing those arguments with an output path, and the outcome
reported for each request of a batch.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ito.engine.duotone import DuotoneSpec
from ito.engine.formats import OutputFormat

# Original camelCase argument names and their snake_case fields
CAMEL_CASE_ALIASES: dict[str, str] = {
    "cropFocus": "crop_focus",
    "toFormat": "to_format",
    "pngCompressionLevel": "png_compression_level",
    "pngCompressionSpeed": "png_compression_speed",
    "jpegProgressive": "jpeg_progressive",
}


def normalize_key(key: str) -> str:
    """Map a camelCase argument name to its snake_case field name."""
    return CAMEL_CASE_ALIASES.get(key, key)


@dataclass(frozen=True)
class TransformArgs:
    """Parameters of one output variant.

    Defaults match the general arguments of the image plugin this
    orchestrator grew out of; they take part in fingerprinting like any
    explicitly passed value.
    """

    to_format: str
    width: float | None = None
    height: float | None = None
    crop_focus: str | int | None = None
    fit: str = "cover"
    background: str = "rgba(0,0,0,1)"
    quality: int = 50
    png_compression_level: int = 9
    png_compression_speed: int = 4
    jpeg_progressive: bool = True
    grayscale: bool = False
    rotate: float = 0
    duotone: DuotoneSpec | None = None

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not isinstance(self.to_format, str) or not self.to_format:
            raise ValueError("to_format is required")

    @property
    def output_format(self) -> OutputFormat:
        """Parsed terminal format.

        Raises:
            EncodeError: If to_format is not supported.
        """
        return OutputFormat.parse(self.to_format)

    def as_dict(self) -> dict[str, Any]:
        """Flat mapping of every argument, duotone expanded to a dict."""
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        if self.duotone is not None:
            data["duotone"] = self.duotone.as_dict()
        return data

    def replace(self, **changes: Any) -> TransformArgs:
        """Return a copy with some arguments changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransformArgs:
        """Build arguments from a flat mapping.

        Keys may use snake_case field names or the original camelCase
        names. A duotone mapping becomes a DuotoneSpec.

        Raises:
            ValueError: If a key is unknown or to_format is missing.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = normalize_key(key)
            if name not in known:
                raise ValueError(f"Unknown transform argument '{key}'")
            kwargs[name] = value

        duotone = kwargs.get("duotone")
        if isinstance(duotone, Mapping):
            kwargs["duotone"] = DuotoneSpec(**duotone)
        elif not duotone:
            kwargs["duotone"] = None

        if "to_format" not in kwargs:
            raise ValueError("to_format is required")
        return cls(**kwargs)


@dataclass(frozen=True)
class TransformRequest:
    """One requested output: where to write it and how to produce it."""

    output_path: Path
    args: TransformArgs

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_path", Path(self.output_path))


@dataclass(frozen=True)
class TransformOutcome:
    """Result of one transform of a batch.

    A successful outcome echoes the request: the file now exists at
    request.output_path. A failed outcome carries the exception.
    """

    request: TransformRequest
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> TransformRequest:
        """Return the request, or raise the transform's error."""
        if self.error is not None:
            raise self.error
        return self.request
