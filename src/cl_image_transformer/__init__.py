"""cl_image_transformer - In-memory rotate, crop and progressive downscale for raster images."""

from .common.codec import decode, encode
from .common.errors import (
    BufferConstructionError,
    InvalidGeometryError,
    TransformError,
    UnsupportedFormatError,
    UnsupportedModeError,
    UnsupportedTransformError,
)
from .common.geometry import Rotation
from .common.pixel_buffer import PixelBuffer
from .common.schemas import TransformerOptions, TransformOutcome
from .transformer import Transformer

__version__ = "0.1.0"

__all__ = [
    "BufferConstructionError",
    "InvalidGeometryError",
    "PixelBuffer",
    "Rotation",
    "TransformError",
    "Transformer",
    "TransformerOptions",
    "TransformOutcome",
    "UnsupportedFormatError",
    "UnsupportedModeError",
    "UnsupportedTransformError",
    "__version__",
    "decode",
    "encode",
]
