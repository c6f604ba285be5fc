"""Pydantic models for batch manifest parsing.

This module contains the models describing a YAML batch manifest:
- DuotoneModel: Duotone colours and opacity
- TransformModel: One requested output variant
- ManifestModel: Batch-wide options plus the transform list
"""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ito.engine.duotone import DuotoneSpec
from ito.engine.formats import OutputFormat
from ito.engine.geometry import Fit
from ito.exceptions import EncodeError
from ito.transform.types import TransformArgs

_HEX_COLOUR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class DuotoneModel(BaseModel):
    """Pydantic model for duotone configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    highlight: str
    shadow: str
    opacity: int | None = Field(default=None, ge=0, le=100)

    @field_validator("highlight", "shadow")
    @classmethod
    def validate_colour(cls, v: str) -> str:
        """Validate hex colour."""
        if not _HEX_COLOUR.match(v):
            raise ValueError(
                f"Invalid colour '{v}'. Must be a hex colour like '#f00e2e'."
            )
        return v

    def to_spec(self) -> DuotoneSpec:
        return DuotoneSpec(self.highlight, self.shadow, self.opacity)


class TransformModel(BaseModel):
    """Pydantic model for one transform entry."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    output: Path | None = None
    to_format: str = Field(alias="toFormat")
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    crop_focus: str | int | None = Field(default=None, alias="cropFocus")
    fit: str = "cover"
    background: str = "rgba(0,0,0,1)"
    quality: int = Field(default=50, ge=0, le=100)
    png_compression_level: int = Field(
        default=9, ge=0, le=9, alias="pngCompressionLevel"
    )
    png_compression_speed: int = Field(
        default=4, ge=1, le=11, alias="pngCompressionSpeed"
    )
    jpeg_progressive: bool = Field(default=True, alias="jpegProgressive")
    grayscale: bool = False
    rotate: float = 0
    duotone: DuotoneModel | None = None

    @field_validator("to_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate output format."""
        try:
            OutputFormat.parse(v)
        except EncodeError as e:
            raise ValueError(str(e)) from None
        return v

    @field_validator("fit")
    @classmethod
    def validate_fit(cls, v: str) -> str:
        """Validate fit mode."""
        try:
            Fit.parse(v)
        except EncodeError as e:
            raise ValueError(str(e)) from None
        return v

    def to_args(self) -> TransformArgs:
        """Convert to TransformArgs."""
        return TransformArgs(
            to_format=self.to_format,
            width=self.width,
            height=self.height,
            crop_focus=self.crop_focus,
            fit=self.fit,
            background=self.background,
            quality=self.quality,
            png_compression_level=self.png_compression_level,
            png_compression_speed=self.png_compression_speed,
            jpeg_progressive=self.jpeg_progressive,
            grayscale=self.grayscale,
            rotate=self.rotate,
            duotone=self.duotone.to_spec() if self.duotone else None,
        )


class ManifestModel(BaseModel):
    """Pydantic model for a batch manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    output_dir: Path | None = Field(default=None, alias="outputDir")
    strip_metadata: bool | None = Field(default=None, alias="stripMetadata")
    use_mozjpeg: bool | None = Field(default=None, alias="useMozjpeg")
    transforms: list[TransformModel] = Field(min_length=1)
