"""Shared test fixtures for ito."""

import io
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from ito.config import clear_config_cache
from ito.engine.runtime import shutdown_engine
from ito.tools import refresh_tools

ORIENTATION_TAG = 0x0112


def make_image(
    size: tuple[int, int] = (1000, 800),
    mode: str = "RGB",
    color=(200, 40, 40),
    orientation: int | None = None,
    fmt: str = "JPEG",
) -> bytes:
    """Encode a solid test image, optionally with an EXIF orientation tag.

    The left half is painted a second colour so orientation changes are
    observable in pixel data.
    """
    image = Image.new(mode, size, color)
    half = Image.new(mode, (size[0] // 2, size[1]), (10, 10, 240) if mode != "L" else 0)
    image.paste(half, (0, 0))

    save_kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[ORIENTATION_TAG] = orientation
        save_kwargs["exif"] = exif.tobytes()

    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def image_factory():
    """Return the make_image helper for tests that need custom images."""
    return make_image


@pytest.fixture
def sample_jpeg(temp_dir: Path) -> Path:
    """A 1000x800 JPEG without orientation metadata."""
    path = temp_dir / "photo.jpg"
    path.write_bytes(make_image())
    return path


@pytest.fixture
def rotated_jpeg(temp_dir: Path) -> Path:
    """A 1000x800 JPEG whose EXIF says it must be rotated 90 degrees."""
    path = temp_dir / "portrait.jpg"
    path.write_bytes(make_image(orientation=6))
    return path


@pytest.fixture
def sample_tiff(temp_dir: Path) -> Path:
    """A 1000x800 TIFF whose orientation tag says it must be rotated 90 degrees."""
    path = temp_dir / "scan.tif"
    path.write_bytes(make_image(orientation=6, fmt="TIFF"))
    return path


@pytest.fixture
def sample_png_rgba(temp_dir: Path) -> Path:
    """A 300x200 RGBA PNG with a semi-transparent fill."""
    path = temp_dir / "logo.png"
    path.write_bytes(make_image((300, 200), "RGBA", (0, 128, 0, 128), fmt="PNG"))
    return path


@pytest.fixture
def corrupt_image(temp_dir: Path) -> Path:
    """A file with an image extension that is not an image."""
    path = temp_dir / "broken.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 definitely not a jpeg")
    return path


@pytest.fixture(autouse=True)
def ito_data_dir(temp_dir: Path):
    """Point ITO_DATA_DIR at an empty temporary directory for every test.

    Keeps a developer's ~/.ito/config.toml and ITO_* variables from
    leaking into tests, and resets process-wide caches afterwards.
    """
    data_dir = temp_dir / ".ito"
    data_dir.mkdir(parents=True, exist_ok=True)

    clean_env = {k: v for k, v in os.environ.items() if not k.startswith("ITO_")}
    clean_env["ITO_DATA_DIR"] = str(data_dir)

    clear_config_cache()
    refresh_tools()
    with patch.dict(os.environ, clean_env, clear=True):
        yield data_dir
    clear_config_cache()
    refresh_tools()


@pytest.fixture(autouse=True)
def reset_engine():
    """Tear down the engine thread pool after each test."""
    yield
    shutdown_engine()
