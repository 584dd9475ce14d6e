"""Pure geometry helpers: rotation kinds, affine maps and resize planning.

Nothing here touches pixels. The Transformer asks these helpers *what* to do
and hands the answer to PixelBuffer primitives.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import NamedTuple

from .errors import UnsupportedTransformError


class Rotation(StrEnum):
    CW_90 = "cw_90"
    CW_180 = "cw_180"
    CW_270 = "cw_270"
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"

    @classmethod
    def parse(cls, kind: "Rotation | str") -> "Rotation":
        """Accept an enum member, its value or its name (case-insensitive)."""
        if isinstance(kind, Rotation):
            return kind
        if isinstance(kind, str):
            key = kind.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise UnsupportedTransformError(f"Unsupported rotation kind: {kind!r}")


class CropRect(NamedTuple):
    x: int
    y: int
    width: int
    height: int


# Exact (cos, sin) for quarter turns, so rotations stay pure pixel permutations.
_QUARTER_TURNS: dict[int, tuple[float, float]] = {
    0: (1.0, 0.0),
    90: (0.0, 1.0),
    180: (-1.0, 0.0),
    270: (0.0, -1.0),
}


class AffineTransform:
    """2D affine map ``(x, y) -> (m00*x + m01*y + m02, m10*x + m11*y + m12)``.

    ``translate``/``rotate``/``scale`` concatenate on the right, so the last
    call is the first one applied to a source point.
    """

    __slots__ = ("m00", "m01", "m02", "m10", "m11", "m12")

    def __init__(
        self,
        m00: float = 1.0,
        m01: float = 0.0,
        m02: float = 0.0,
        m10: float = 0.0,
        m11: float = 1.0,
        m12: float = 0.0,
    ) -> None:
        self.m00 = m00
        self.m01 = m01
        self.m02 = m02
        self.m10 = m10
        self.m11 = m11
        self.m12 = m12

    def _concatenate(self, a: float, b: float, c: float, d: float, e: float, f: float) -> "AffineTransform":
        m00, m01, m02 = self.m00, self.m01, self.m02
        m10, m11, m12 = self.m10, self.m11, self.m12
        self.m00 = m00 * a + m01 * d
        self.m01 = m00 * b + m01 * e
        self.m02 = m00 * c + m01 * f + m02
        self.m10 = m10 * a + m11 * d
        self.m11 = m10 * b + m11 * e
        self.m12 = m10 * c + m11 * f + m12
        return self

    def translate(self, tx: float, ty: float) -> "AffineTransform":
        return self._concatenate(1.0, 0.0, tx, 0.0, 1.0, ty)

    def scale(self, sx: float, sy: float) -> "AffineTransform":
        return self._concatenate(sx, 0.0, 0.0, 0.0, sy, 0.0)

    def rotate(self, degrees: float) -> "AffineTransform":
        quarter = _QUARTER_TURNS.get(int(degrees) % 360) if float(degrees).is_integer() else None
        if quarter is not None:
            cos, sin = quarter
        else:
            theta = math.radians(degrees)
            cos, sin = math.cos(theta), math.sin(theta)
        return self._concatenate(cos, -sin, 0.0, sin, cos, 0.0)

    @property
    def determinant(self) -> float:
        return self.m00 * self.m11 - self.m01 * self.m10

    def inverse(self) -> "AffineTransform":
        det = self.determinant
        if det == 0:
            raise UnsupportedTransformError("Affine transform is not invertible")
        return AffineTransform(
            self.m11 / det,
            -self.m01 / det,
            (self.m01 * self.m12 - self.m11 * self.m02) / det,
            -self.m10 / det,
            self.m00 / det,
            (self.m10 * self.m02 - self.m00 * self.m12) / det,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (
            self.m00 * x + self.m01 * y + self.m02,
            self.m10 * x + self.m11 * y + self.m12,
        )

    def coefficients(self) -> tuple[float, float, float, float, float, float]:
        return (self.m00, self.m01, self.m02, self.m10, self.m11, self.m12)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return self.coefficients() == other.coefficients()

    def __repr__(self) -> str:
        return "AffineTransform(" + ", ".join(f"{c:g}" for c in self.coefficients()) + ")"


def rotation_transform(kind: Rotation | str, width: int, height: int) -> tuple[AffineTransform, int, int]:
    """Build the affine map and destination size for rotating a ``width x height`` image.

    Returns:
        ``(transform, dst_width, dst_height)``

    Raises:
        UnsupportedTransformError: If ``kind`` is not a known rotation
    """
    rotation = Rotation.parse(kind)
    tx = AffineTransform()

    if rotation is Rotation.CW_90:
        dst_w, dst_h = height, width
        tx.translate(dst_w, 0).rotate(90)
    elif rotation is Rotation.CW_270:
        dst_w, dst_h = height, width
        tx.translate(0, dst_h).rotate(-90)
    elif rotation is Rotation.CW_180:
        dst_w, dst_h = width, height
        tx.translate(dst_w, dst_h).rotate(180)
    elif rotation is Rotation.FLIP_HORIZONTAL:
        dst_w, dst_h = width, height
        tx.translate(dst_w, 0).scale(-1.0, 1.0)
    else:
        dst_w, dst_h = width, height
        tx.translate(0, dst_h).scale(1.0, -1.0)

    return tx, dst_w, dst_h


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return int(math.floor(value + 0.5))


def halving_plan(width: int, height: int, target_width: int, target_height: int) -> list[tuple[int, int]]:
    """Intermediate sizes for a progressive downscale, final size included.

    Each step halves every dimension still above its target, clamped so it
    never drops below the target. Callers must ensure the target is a
    downscale (or equal) in both dimensions.
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")
    if target_width > width or target_height > height:
        raise ValueError(
            f"Progressive resize only downscales: {width}x{height} -> {target_width}x{target_height}"
        )

    steps: list[tuple[int, int]] = []
    w, h = width, height
    while (w, h) != (target_width, target_height):
        if w > target_width:
            w = max(target_width, w // 2)
        if h > target_height:
            h = max(target_height, h // 2)
        steps.append((w, h))
    return steps


def fit_crop_rect(width: int, height: int, target_width: int, target_height: int) -> CropRect:
    """Centered crop of a ``width x height`` image matching the target aspect ratio.

    When the aspect ratios already agree the full image rectangle is returned.
    """
    candidate_w = round_half_up(height * target_width / target_height)
    candidate_h = round_half_up(width * target_height / target_width)

    if candidate_w < width:
        return CropRect((width - candidate_w) // 2, 0, max(1, candidate_w), height)
    if candidate_h < height:
        return CropRect(0, (height - candidate_h) // 2, width, max(1, candidate_h))
    return CropRect(0, 0, width, height)


def canvas_offset(image_extent: int, canvas_extent: int) -> int:
    """Offset that centers an image on a larger canvas; 0 when the canvas is smaller."""
    if image_extent < canvas_extent:
        return (canvas_extent - image_extent) // 2
    return 0
