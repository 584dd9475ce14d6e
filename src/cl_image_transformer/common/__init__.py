"""Pixel buffer, geometry, codec and error types shared across the package."""

from .errors import (
    BufferConstructionError,
    InvalidGeometryError,
    TransformError,
    UnsupportedFormatError,
    UnsupportedModeError,
    UnsupportedTransformError,
)
from .geometry import AffineTransform, CropRect, Rotation
from .pixel_buffer import MAX_BUFFER_PIXELS, PixelBuffer
from .schemas import TransformerOptions, TransformOutcome

__all__ = [
    "AffineTransform",
    "BufferConstructionError",
    "CropRect",
    "InvalidGeometryError",
    "MAX_BUFFER_PIXELS",
    "PixelBuffer",
    "Rotation",
    "TransformError",
    "TransformerOptions",
    "TransformOutcome",
    "UnsupportedFormatError",
    "UnsupportedModeError",
    "UnsupportedTransformError",
]
