"""Resize, crop and rotation helpers operating on Pillow images.

Fit modes reconcile a requested box with the source aspect ratio:

- cover: scale to fill the box, crop the overflow at the crop focus
- contain: scale to fit inside the box, pad with the background colour
- fill: stretch to the exact box, ignoring aspect ratio
- inside: scale to fit inside the box, no padding
- outside: scale to cover the box, no cropping
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from PIL import Image, ImageColor

from ito.exceptions import EncodeError

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS

# Number of candidate windows evaluated by the entropy crop strategy
ENTROPY_CANDIDATES = 9


class Fit(Enum):
    """How a resize reconciles aspect-ratio mismatches."""

    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"
    INSIDE = "inside"
    OUTSIDE = "outside"

    @classmethod
    def parse(cls, value: str | None) -> Fit:
        """Parse a fit name. None means cover.

        Raises:
            EncodeError: If the fit name is unknown.
        """
        if value is None:
            return cls.COVER
        try:
            return cls(str(value).casefold())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise EncodeError(
                f"Invalid fit '{value}'. Must be one of: {valid}"
            ) from None


# Gravity anchors as (x, y) fractions of the overflow: 0 = left/top
GRAVITY_ANCHORS: dict[str, tuple[float, float]] = {
    "center": (0.5, 0.5),
    "north": (0.5, 0.0),
    "northeast": (1.0, 0.0),
    "east": (1.0, 0.5),
    "southeast": (1.0, 1.0),
    "south": (0.5, 1.0),
    "southwest": (0.0, 1.0),
    "west": (0.0, 0.5),
    "northwest": (0.0, 0.0),
}

# Content-aware strategies, resolved per image rather than by a fixed anchor
CROP_STRATEGIES = frozenset({"entropy", "attention"})

_POSITION_ALIASES: dict[str, str] = {
    "centre": "center",
    "top": "north",
    "right top": "northeast",
    "right": "east",
    "right bottom": "southeast",
    "bottom": "south",
    "left bottom": "southwest",
    "left": "west",
    "left top": "northwest",
}

# Numeric gravity and strategy codes accepted by the original crop API
_NUMERIC_POSITIONS: dict[int, str] = {
    0: "center",
    1: "north",
    2: "east",
    3: "northeast",
    4: "south",
    6: "southeast",
    8: "west",
    9: "northwest",
    12: "southwest",
    16: "entropy",
    17: "attention",
}

_RGBA_FUNCTION = re.compile(
    r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([0-9.]+)\s*\)$",
    re.IGNORECASE,
)


def parse_position(value: str | int | None) -> str:
    """Normalize a crop focus to a gravity name or crop strategy.

    Args:
        value: Gravity name ("north"), position ("right top"), strategy
            ("entropy"), numeric code, or None for center.

    Returns:
        A key of GRAVITY_ANCHORS or a member of CROP_STRATEGIES.

    Raises:
        EncodeError: If the value is not recognized.
    """
    if value is None:
        return "center"
    if isinstance(value, bool):
        raise EncodeError(f"Invalid crop focus {value!r}")
    if isinstance(value, int):
        if value in _NUMERIC_POSITIONS:
            return _NUMERIC_POSITIONS[value]
        raise EncodeError(f"Invalid crop focus {value!r}")

    name = " ".join(str(value).casefold().split())
    name = _POSITION_ALIASES.get(name, name)
    if name in GRAVITY_ANCHORS or name in CROP_STRATEGIES:
        return name
    if name.isdigit():
        return parse_position(int(name))
    raise EncodeError(f"Invalid crop focus {value!r}")


def parse_color(value: str | None) -> tuple[int, int, int, int]:
    """Parse a CSS-style colour to an RGBA tuple.

    rgba() alpha is accepted either as a 0-1 fraction or a 0-255 integer.
    None means opaque black.

    Raises:
        EncodeError: If the colour cannot be parsed.
    """
    if value is None:
        return (0, 0, 0, 255)

    match = _RGBA_FUNCTION.match(value.strip())
    if match:
        r, g, b = (int(match.group(i)) for i in (1, 2, 3))
        alpha = float(match.group(4))
        a = round(alpha * 255) if alpha <= 1 else round(alpha)
        if max(r, g, b, a) > 255:
            raise EncodeError(f"Invalid background colour {value!r}")
        return (r, g, b, a)

    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        raise EncodeError(f"Invalid background colour {value!r}") from None
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb  # type: ignore[return-value]


def has_alpha(image: Image.Image) -> bool:
    """Return True if the image carries transparency."""
    return image.mode in ("RGBA", "LA", "PA", "La", "RGBa") or (
        "transparency" in image.info
    )


def _scaled(length: int, scale: float) -> int:
    return max(1, int(length * scale + 0.5))


def _entropy_offset(image: Image.Image, width: int, height: int) -> tuple[int, int]:
    """Pick the crop window with the highest entropy.

    Only the axis that overflows is searched; candidates are evenly
    spaced between the two extremes.
    """
    overflow_x = image.width - width
    overflow_y = image.height - height
    best = (overflow_x // 2, overflow_y // 2)
    best_entropy = -1.0

    for i in range(ENTROPY_CANDIDATES):
        fraction = i / (ENTROPY_CANDIDATES - 1)
        left = int(overflow_x * fraction + 0.5)
        top = int(overflow_y * fraction + 0.5)
        entropy = image.crop((left, top, left + width, top + height)).entropy()
        if entropy > best_entropy:
            best_entropy = entropy
            best = (left, top)

    return best


def _crop_to_box(
    image: Image.Image, width: int, height: int, position: str
) -> Image.Image:
    if image.size == (width, height):
        return image
    if position in CROP_STRATEGIES:
        # attention has no cheap pixel-level equivalent; entropy is the
        # closest content-aware approximation
        left, top = _entropy_offset(image, width, height)
    else:
        fx, fy = GRAVITY_ANCHORS[position]
        left = int((image.width - width) * fx + 0.5)
        top = int((image.height - height) * fy + 0.5)
    return image.crop((left, top, left + width, top + height))


def _pad_to_box(
    image: Image.Image,
    width: int,
    height: int,
    position: str,
    background: tuple[int, int, int, int],
) -> Image.Image:
    if image.size == (width, height):
        return image
    mode = "RGBA" if has_alpha(image) or background[3] < 255 else "RGB"
    fill = background if mode == "RGBA" else background[:3]
    canvas = Image.new(mode, (width, height), fill)
    fx, fy = GRAVITY_ANCHORS.get(position, GRAVITY_ANCHORS["center"])
    left = int((width - image.width) * fx + 0.5)
    top = int((height - image.height) * fy + 0.5)
    canvas.paste(image.convert(mode), (left, top))
    return canvas


def resize_image(
    image: Image.Image,
    width: int | None,
    height: int | None,
    *,
    fit: Fit = Fit.COVER,
    position: str = "center",
    background: tuple[int, int, int, int] = (0, 0, 0, 255),
) -> Image.Image:
    """Resize an image into a target box.

    When only one dimension is given, the other follows the source aspect
    ratio and fit is irrelevant.

    Args:
        image: Source image.
        width: Target width in pixels, or None.
        height: Target height in pixels, or None.
        fit: How to reconcile aspect-ratio mismatches.
        position: Normalized crop focus (see parse_position).
        background: RGBA fill for contain padding.

    Returns:
        The resized image (the input itself when no dimension is given).
    """
    if width is None and height is None:
        return image

    src_width, src_height = image.size

    if width is None:
        width = _scaled(src_width, height / src_height)
        return image.resize((width, height), RESAMPLE)
    if height is None:
        height = _scaled(src_height, width / src_width)
        return image.resize((width, height), RESAMPLE)

    if fit is Fit.FILL:
        return image.resize((width, height), RESAMPLE)

    scale_x = width / src_width
    scale_y = height / src_height
    if fit in (Fit.COVER, Fit.OUTSIDE):
        scale = max(scale_x, scale_y)
    else:
        scale = min(scale_x, scale_y)

    new_size = (_scaled(src_width, scale), _scaled(src_height, scale))
    resized = image.resize(new_size, RESAMPLE) if new_size != image.size else image

    if fit is Fit.COVER:
        return _crop_to_box(resized, width, height, position)
    if fit is Fit.CONTAIN:
        return _pad_to_box(resized, width, height, position, background)
    return resized


def rotate_image(image: Image.Image, angle: float) -> Image.Image:
    """Rotate an image clockwise by angle degrees.

    Multiples of 90 are lossless transposes; other angles expand the
    canvas to fit the rotated image.
    """
    angle = angle % 360
    if angle == 0:
        return image
    if angle == 90:
        return image.transpose(Image.Transpose.ROTATE_270)
    if angle == 180:
        return image.transpose(Image.Transpose.ROTATE_180)
    if angle == 270:
        return image.transpose(Image.Transpose.ROTATE_90)
    # Pillow rotates counter-clockwise
    return image.rotate(-angle, resample=Image.Resampling.BICUBIC, expand=True)


def to_grayscale(image: Image.Image) -> Image.Image:
    """Desaturate an image, keeping its alpha channel if any."""
    if has_alpha(image):
        return image.convert("RGBA").convert("LA")
    return image.convert("L")
