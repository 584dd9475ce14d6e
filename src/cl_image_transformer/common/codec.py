"""Codec boundary: decode files/bytes into PixelBuffers and encode them back.

Format selection follows the file-extension convention; the transformation
core never calls into Pillow's codecs directly.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO

from PIL import Image

from .errors import UnsupportedFormatError
from .pixel_buffer import PixelBuffer

DEFAULT_JPEG_QUALITY = 85

_PIL_FORMATS: dict[str, str] = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "gif": "GIF",
    "bmp": "BMP",
    "tif": "TIFF",
    "tiff": "TIFF",
}

# Formats that cannot store an alpha band.
_OPAQUE_ONLY = {"JPEG", "BMP"}


def get_pil_format(format_str: str) -> str:
    """Convert a format hint or extension (with or without dot) to a Pillow format name.

    Raises:
        UnsupportedFormatError: If the hint is empty or unknown
    """
    key = format_str.strip().lstrip(".").lower()
    if not key:
        raise UnsupportedFormatError("Empty image format hint")
    pil_format = _PIL_FORMATS.get(key)
    if pil_format is None:
        raise UnsupportedFormatError(f"Unsupported image format: {format_str!r}")
    return pil_format


def format_from_path(path: str | Path) -> str:
    """Pillow format name derived from the file extension of ``path``."""
    suffix = Path(path).suffix
    if not suffix:
        raise UnsupportedFormatError(f"Cannot derive an image format from path without extension: {path}")
    return get_pil_format(suffix)


def decode(source: str | Path | bytes | BinaryIO) -> PixelBuffer:
    """Decode an image file, raw bytes or binary stream into a PixelBuffer.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        OSError: If Pillow cannot identify or read the image
    """
    if isinstance(source, bytes):
        source = BytesIO(source)
    elif isinstance(source, (str, Path)) and not Path(source).exists():
        raise FileNotFoundError(f"Input file not found: {source}")

    with Image.open(source) as img:
        img.load()
        return PixelBuffer.from_image(img)


def encode(buffer: PixelBuffer, format_hint: str, quality: int | None = None) -> bytes:
    """Serialize ``buffer`` to bytes in the format named by ``format_hint``."""
    out = BytesIO()
    _write(buffer, out, get_pil_format(format_hint), quality)
    return out.getvalue()


def save(buffer: PixelBuffer, path: str | Path, quality: int | None = None) -> str:
    """Encode ``buffer`` to ``path``, choosing the format from its extension.

    Raises:
        UnsupportedFormatError: If the extension is missing or unknown
        FileNotFoundError: If the output directory does not exist
    """
    path = Path(path)
    pil_format = format_from_path(path)
    if not path.parent.exists():
        raise FileNotFoundError(f"Output directory does not exist: {path.parent}")

    with open(path, "wb") as f:
        _write(buffer, f, pil_format, quality)
    return str(path)


def _write(buffer: PixelBuffer, stream: BinaryIO, pil_format: str, quality: int | None) -> None:
    img = buffer.to_image()
    try:
        if pil_format in _OPAQUE_ONLY and img.mode == "RGBA":
            img = img.convert("RGB")

        save_kwargs: dict[str, object] = {}
        if pil_format in ("JPEG", "WEBP"):
            save_kwargs["quality"] = quality if quality is not None else DEFAULT_JPEG_QUALITY
        if pil_format == "PNG":
            save_kwargs["optimize"] = True

        img.save(stream, format=pil_format, **save_kwargs)
    finally:
        img.close()
