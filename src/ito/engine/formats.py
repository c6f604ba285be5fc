"""Output formats supported by the engine."""

from __future__ import annotations

from enum import Enum

from ito.exceptions import EncodeError

_ALIASES: dict[str, str] = {
    "jpeg": "jpg",
    "tif": "tiff",
}

_PILLOW_NAMES: dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "webp": "WEBP",
    "tiff": "TIFF",
    "gif": "GIF",
}


class OutputFormat(Enum):
    """Terminal encoding formats."""

    PNG = "png"
    JPG = "jpg"
    WEBP = "webp"
    TIFF = "tiff"
    GIF = "gif"

    @classmethod
    def parse(cls, value: str) -> OutputFormat:
        """Parse a user-facing format name.

        Accepts "jpeg" and "tif" as aliases.

        Raises:
            EncodeError: If the format is not supported.
        """
        name = value.casefold().lstrip(".")
        name = _ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(f.value for f in cls)
            raise EncodeError(
                f"Unsupported output format '{value}'. Must be one of: {supported}"
            ) from None

    @classmethod
    def from_pillow(cls, pillow_format: str | None) -> OutputFormat | None:
        """Map a Pillow format name ("JPEG", "PNG") to an OutputFormat."""
        if not pillow_format:
            return None
        for fmt, name in _PILLOW_NAMES.items():
            if name == pillow_format.upper():
                return cls(fmt)
        return None

    @property
    def pillow_format(self) -> str:
        return _PILLOW_NAMES[self.value]

    @property
    def extension(self) -> str:
        return self.value

    @property
    def supports_alpha(self) -> bool:
        return self is not OutputFormat.JPG

    @property
    def supports_exif(self) -> bool:
        return self is not OutputFormat.GIF
