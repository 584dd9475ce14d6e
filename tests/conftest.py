"""Test configuration and fixtures for cl_image_transformer.

This module provides:
- Synthetic pixel fixtures (numpy arrays with unique per-pixel values)
- Synthetic image files generated with PIL into tmp_path
- A loguru capture fixture for asserting diagnostic events
"""

from collections.abc import Iterator
from pathlib import Path

import numpy as np
import pytest
from loguru import logger
from PIL import Image, ImageDraw

from cl_image_transformer import PixelBuffer

# ============================================================================
# Helpers
# ============================================================================


def make_pixels(width: int, height: int, channels: int = 3) -> np.ndarray:
    """Deterministic (H, W, C) uint8 array where neighbouring pixels differ."""
    ys, xs = np.mgrid[0:height, 0:width]
    planes = [
        (xs * 7 + ys * 3) % 256,
        (xs * 5 + ys * 11) % 256,
        (xs * 13 + ys * 17) % 256,
    ]
    if channels == 4:
        planes.append(np.full_like(xs, 200))
    return np.stack(planes, axis=-1).astype(np.uint8)


# ============================================================================
# Buffer Fixtures
# ============================================================================


@pytest.fixture
def pixel_factory():
    """Expose make_pixels so tests can build grids of arbitrary size."""
    return make_pixels


@pytest.fixture
def rgb_pixels() -> np.ndarray:
    """Non-square 40x30 opaque pixel grid."""
    return make_pixels(40, 30)


@pytest.fixture
def rgba_pixels() -> np.ndarray:
    """Non-square 40x30 grid with a translucent alpha band."""
    return make_pixels(40, 30, channels=4)


@pytest.fixture
def rgb_buffer(rgb_pixels: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_array(rgb_pixels)


@pytest.fixture
def rgba_buffer(rgba_pixels: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_array(rgba_pixels)


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def synthetic_image(tmp_path: Path) -> Path:
    """Generate a 1000x800 synthetic PNG using PIL."""
    output_path = tmp_path / "synthetic.png"

    img = Image.new("RGB", (1000, 800), color=(73, 109, 137))
    draw = ImageDraw.Draw(img)

    for i in range(0, 1000, 50):
        draw.line([(i, 0), (i, 800)], fill=(255, 255, 255), width=2)
    for i in range(0, 800, 50):
        draw.line([(0, i), (1000, i)], fill=(255, 255, 255), width=2)

    draw.ellipse([400, 300, 600, 500], fill=(200, 100, 100))

    img.save(output_path, "PNG")

    return output_path


@pytest.fixture
def transparent_image(tmp_path: Path) -> Path:
    """Generate a 200x100 RGBA PNG with a transparent left half."""
    output_path = tmp_path / "transparent.png"

    img = Image.new("RGBA", (200, 100), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([100, 0, 199, 99], fill=(255, 0, 0, 255))

    img.save(output_path, "PNG")

    return output_path


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def log_records() -> Iterator[list[dict]]:
    """Collect loguru records (level name, message, extra) emitted during a test."""
    records: list[dict] = []

    def sink(message) -> None:
        record = message.record
        records.append(
            {
                "level": record["level"].name,
                "message": record["message"],
                "extra": dict(record["extra"]),
            }
        )

    handler_id = logger.add(sink, level="DEBUG")
    yield records
    logger.remove(handler_id)
