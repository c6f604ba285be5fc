"""Duotone colour remapping.

Each pixel's relative luminance picks a colour on the gradient running
from the shadow colour (black) to the highlight colour (white). An
optional opacity blends the duotone over the original pixels.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from PIL import Image, ImageOps

from ito.engine.formats import OutputFormat
from ito.engine.geometry import has_alpha
from ito.engine.pipeline import ImagePipeline
from ito.exceptions import EncodeError

# Rec. 709 relative luminance weights
LUMINANCE_MATRIX = (0.2126, 0.7152, 0.0722, 0)


@dataclass(frozen=True)
class DuotoneSpec:
    """Two-colour mapping applied after every other pixel step.

    Attributes:
        highlight: Hex colour for the brightest pixels ("#f00e2e").
        shadow: Hex colour for the darkest pixels ("#192550").
        opacity: Percentage (1-100) of duotone blended over the original;
            None or 0 replaces the original entirely.
    """

    highlight: str
    shadow: str
    opacity: int | None = None

    def as_dict(self) -> dict[str, str | int]:
        data: dict[str, str | int] = {
            "highlight": self.highlight,
            "shadow": self.shadow,
        }
        if self.opacity:
            data["opacity"] = self.opacity
        return data


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Parse "#rrggbb" or "#rgb" to an RGB tuple.

    Raises:
        EncodeError: If the value is not a hex colour.
    """
    digits = value.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6:
        raise EncodeError(f"Invalid duotone colour {value!r}")
    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        raise EncodeError(f"Invalid duotone colour {value!r}") from None


def duotone_image(
    image: Image.Image,
    highlight: tuple[int, int, int],
    shadow: tuple[int, int, int],
    opacity: int | None = None,
    keep_alpha: bool = True,
) -> Image.Image:
    """Remap an image onto the shadow-to-highlight gradient."""
    alpha = image.convert("RGBA").getchannel("A") if has_alpha(image) else None
    rgb = image.convert("RGB")
    luminance = rgb.convert("L", LUMINANCE_MATRIX)
    toned = ImageOps.colorize(luminance, black=shadow, white=highlight)
    if opacity:
        toned = Image.blend(rgb, toned, opacity / 100)
    if alpha is not None and keep_alpha:
        toned.putalpha(alpha)
    return toned


def apply_duotone(
    spec: DuotoneSpec, fmt: OutputFormat, pipeline: ImagePipeline
) -> ImagePipeline:
    """Append a duotone remap to a staged pipeline.

    Args:
        spec: Highlight/shadow colours and optional opacity.
        fmt: Terminal output format; alpha is kept only where it survives.
        pipeline: Pipeline whose geometry and colour steps are already staged.

    Returns:
        The same pipeline with the duotone step appended.

    Raises:
        EncodeError: If a colour or the opacity is invalid.
    """
    if spec.opacity is not None and not 0 <= spec.opacity <= 100:
        raise EncodeError(f"Duotone opacity must be 0-100, got {spec.opacity}")
    step = functools.partial(
        duotone_image,
        highlight=hex_to_rgb(spec.highlight),
        shadow=hex_to_rgb(spec.shadow),
        opacity=spec.opacity,
        keep_alpha=fmt.supports_alpha,
    )
    return pipeline.apply("duotone", step)
