"""In-memory RGB/RGBA pixel buffer backed by a Pillow image.

A PixelBuffer is the only object that touches pixel data. It exposes the
primitives the Transformer composes: sub-rectangle extraction, smooth
resampling, affine drawing and canvas placement. Every primitive returns a
new buffer; the receiver is never modified.
"""

from __future__ import annotations

import hashlib
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .errors import BufferConstructionError, InvalidGeometryError, UnsupportedModeError
from .geometry import AffineTransform

# Upper bound on width * height for any buffer this library allocates.
MAX_BUFFER_PIXELS = 1 << 28

ResampleFilter = Literal["bicubic", "bilinear", "lanczos"]

_RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "bicubic": Image.Resampling.BICUBIC,
    "bilinear": Image.Resampling.BILINEAR,
    "lanczos": Image.Resampling.LANCZOS,
}


def _check_allocation(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise BufferConstructionError(f"Buffer dimensions must be positive, got {width}x{height}")
    if width * height > MAX_BUFFER_PIXELS:
        raise BufferConstructionError(
            f"Buffer of {width}x{height} exceeds the {MAX_BUFFER_PIXELS} pixel limit"
        )


class PixelBuffer:
    """A ``width x height`` grid of RGB (opaque) or RGBA (alpha-capable) pixels."""

    __slots__ = ("_image",)

    _image: Image.Image

    def __init__(self, image: Image.Image) -> None:
        if image.mode not in ("RGB", "RGBA"):
            raise UnsupportedModeError(f"PixelBuffer requires an RGB or RGBA image, got mode {image.mode!r}")
        if image.width <= 0 or image.height <= 0:
            raise InvalidGeometryError(f"PixelBuffer requires a non-empty image, got {image.width}x{image.height}")
        self._image = image

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def new(cls, width: int, height: int, has_alpha: bool = False) -> "PixelBuffer":
        """Allocate a buffer cleared to black (opaque) or fully transparent (alpha)."""
        _check_allocation(width, height)
        mode = "RGBA" if has_alpha else "RGB"
        try:
            image = Image.new(mode, (width, height), (0, 0, 0, 0) if has_alpha else (0, 0, 0))
        except (MemoryError, ValueError, OverflowError) as exc:
            raise BufferConstructionError(f"Could not allocate {width}x{height} {mode} buffer: {exc}") from exc
        return cls(image)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Wrap a decoded Pillow image, normalizing it to RGB or RGBA.

        Palette images with a transparency entry and any mode carrying an
        alpha band become RGBA; everything else becomes RGB.
        """
        has_alpha = image.mode in ("RGBA", "LA", "PA", "RGBa", "La") or (
            image.mode == "P" and "transparency" in image.info
        )
        mode = "RGBA" if has_alpha else "RGB"
        if image.mode == mode:
            return cls(image.copy())
        return cls(image.convert(mode))

    @classmethod
    def from_array(cls, pixels: NDArray[np.uint8]) -> "PixelBuffer":
        """Build a buffer from an ``(height, width, 3|4)`` uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise UnsupportedModeError(f"Expected an (H, W, 3|4) array, got shape {pixels.shape}")
        return cls(Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)))

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def has_alpha(self) -> bool:
        return self._image.mode == "RGBA"

    @property
    def channels(self) -> int:
        return 4 if self.has_alpha else 3

    def is_opaque(self) -> bool:
        """True when no pixel has alpha below 255 (always True for RGB)."""
        if not self.has_alpha:
            return True
        alpha_min, _ = self._image.getchannel("A").getextrema()
        return alpha_min == 255

    def to_opaque(self) -> "PixelBuffer":
        """Drop the alpha band. Returns ``self`` if already opaque-mode."""
        if not self.has_alpha:
            return self
        return PixelBuffer(self._image.convert("RGB"))

    def to_array(self) -> NDArray[np.uint8]:
        return np.asarray(self._image, dtype=np.uint8).copy()

    def to_image(self) -> Image.Image:
        """Detached Pillow copy, safe to hand to callers."""
        return self._image.copy()

    def tobytes(self) -> bytes:
        return self._image.tobytes()

    def digest(self) -> str:
        """SHA-512 of mode, size and raw pixel bytes."""
        h = hashlib.sha512()
        h.update(f"{self._image.mode}:{self.width}x{self.height}:".encode())
        h.update(self._image.tobytes())
        return h.hexdigest()

    def release(self) -> None:
        """Free pixel storage. The buffer must not be used afterwards."""
        self._image.close()

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def subimage(self, x: int, y: int, width: int, height: int) -> "PixelBuffer":
        """Copy of the pixels in ``[x, x+width) x [y, y+height)``.

        Raises:
            InvalidGeometryError: If the rectangle is empty or not fully inside the buffer
        """
        if x < 0 or y < 0 or width <= 0 or height <= 0 or x + width > self.width or y + height > self.height:
            raise InvalidGeometryError(
                f"Rectangle ({x}, {y}, {width}, {height}) is outside {self.width}x{self.height} buffer"
            )
        return PixelBuffer(self._image.crop((x, y, x + width, y + height)))

    def resample(self, width: int, height: int, resample_filter: ResampleFilter = "bicubic") -> "PixelBuffer":
        """Map the whole buffer onto ``width x height`` with smooth interpolation.

        The channel mode is preserved.
        """
        _check_allocation(width, height)
        try:
            resampled = self._image.resize((width, height), _RESAMPLE_FILTERS[resample_filter])
        except MemoryError as exc:
            raise BufferConstructionError(f"Could not allocate {width}x{height} buffer: {exc}") from exc
        return PixelBuffer(resampled)

    def affine_draw(self, transform: AffineTransform, width: int, height: int) -> "PixelBuffer":
        """Draw this buffer into a ``width x height`` destination under ``transform``.

        Each destination pixel center is mapped back through the inverse
        transform and takes the source pixel it lands in (nearest neighbour),
        so quarter turns and flips are exact permutations. Destination pixels
        with no source are black, or fully transparent for RGBA.
        """
        _check_allocation(width, height)
        inverse = transform.inverse()
        a, b, c, d, e, f = inverse.coefficients()

        try:
            src = np.asarray(self._image, dtype=np.uint8)
            out = np.zeros((height, width, self.channels), dtype=np.uint8)
        except MemoryError as exc:
            raise BufferConstructionError(f"Could not allocate {width}x{height} buffer: {exc}") from exc

        cy, cx = np.mgrid[0:height, 0:width].astype(np.float64) + 0.5
        sx = np.floor(a * cx + b * cy + c).astype(np.intp)
        sy = np.floor(d * cx + e * cy + f).astype(np.intp)
        inside = (sx >= 0) & (sx < self.width) & (sy >= 0) & (sy < self.height)
        out[inside] = src[sy[inside], sx[inside]]

        return PixelBuffer.from_array(out)

    def place(self, width: int, height: int, x: int, y: int) -> "PixelBuffer":
        """Place this buffer unscaled at ``(x, y)`` on a cleared ``width x height`` canvas.

        Parts falling outside the canvas are clipped.

        Raises:
            InvalidGeometryError: If the offset is negative
        """
        if x < 0 or y < 0:
            raise InvalidGeometryError(f"Canvas offset must be non-negative, got ({x}, {y})")
        canvas = PixelBuffer.new(width, height, has_alpha=self.has_alpha)
        canvas._image.paste(self._image, (x, y))
        return canvas

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self._image.mode == other._image.mode
            and self.size == other.size
            and self._image.tobytes() == other._image.tobytes()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, {'RGBA' if self.has_alpha else 'RGB'})"
