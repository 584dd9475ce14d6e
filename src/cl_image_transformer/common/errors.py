"""Exceptions raised by the transformation core and the codec boundary."""

from typing import override


class TransformError(Exception):
    """Base class for every error raised by cl_image_transformer."""

    def __init__(self, message: str = "Image transformation failed."):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class InvalidGeometryError(TransformError, ValueError):
    """A crop/resize request whose rectangle or target size cannot be honoured."""


class UnsupportedTransformError(TransformError, ValueError):
    """An unrecognized rotation kind was requested."""


class BufferConstructionError(TransformError, MemoryError):
    """A destination pixel buffer could not be allocated."""


class UnsupportedFormatError(TransformError, ValueError):
    """The codec cannot map a file extension or format hint to an encoder."""


class UnsupportedModeError(TransformError, ValueError):
    """Pixel data is not in a layout a PixelBuffer can hold."""
