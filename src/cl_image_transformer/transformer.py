"""Stateful image transformer: rotate, crop and quality-preserving downscale.

A Transformer exclusively owns one PixelBuffer. Every operation computes a
new buffer from the current one and only then swaps it in, releasing the old
storage, so a failing operation leaves the previous image untouched.

Instances are not thread-safe; use one Transformer per image per thread.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger as _default_logger

from .common import codec
from .common.errors import InvalidGeometryError, TransformError
from .common.geometry import (
    CropRect,
    Rotation,
    canvas_offset,
    fit_crop_rect,
    halving_plan,
    rotation_transform,
    round_half_up,
)
from .common.pixel_buffer import PixelBuffer
from .common.schemas import TransformerOptions, TransformOutcome

if TYPE_CHECKING:
    from loguru import Logger
    from PIL import Image


class Transformer:
    """Applies geometry operations in sequence to a single owned image."""

    options: TransformerOptions
    source_path: Path | None

    def __init__(
        self,
        buffer: PixelBuffer,
        *,
        options: TransformerOptions | None = None,
        logger: Logger | None = None,
        source_path: str | Path | None = None,
    ) -> None:
        """
        Take ownership of ``buffer``.

        Args:
            buffer: Decoded image; the caller must not use it afterwards
            options: Behavioural switches, defaults to TransformerOptions()
            logger: Diagnostic sink, defaults to the loguru logger bound
                with ``component="transformer"``
            source_path: File the buffer was decoded from, used by save()
        """
        self.options = options if options is not None else TransformerOptions()
        self._log: Logger = logger if logger is not None else _default_logger.bind(component="transformer")
        self.source_path = Path(source_path) if source_path is not None else None

        # Channel mode is fixed here for every buffer derived later.
        if self.options.collapse_opaque_alpha and buffer.has_alpha and buffer.is_opaque():
            opaque = buffer.to_opaque()
            buffer.release()
            buffer = opaque

        self._buffer: PixelBuffer = buffer
        self._width: int = buffer.width
        self._height: int = buffer.height

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        options: TransformerOptions | None = None,
        logger: Logger | None = None,
    ) -> "Transformer":
        """Decode ``path`` and wrap it; save() will write back to the same file."""
        return cls(codec.decode(path), options=options, logger=logger, source_path=path)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def has_alpha(self) -> bool:
        return self._buffer.has_alpha

    @property
    def buffer(self) -> PixelBuffer:
        """The currently owned buffer.

        Borrowed: it is released by the next operation that replaces it.
        Use to_image() for a copy that outlives further transforms.
        """
        return self._buffer

    def to_image(self) -> Image.Image:
        return self._buffer.to_image()

    def save(self, quality: int | None = None) -> str:
        """Encode the current image back to the file it was opened from."""
        if self.source_path is None:
            raise TransformError("Transformer was not opened from a file; use save_to()")
        return codec.save(self._buffer, self.source_path, quality=quality)

    def save_to(self, path: str | Path, quality: int | None = None) -> str:
        """Encode the current image to ``path`` in the format named by its extension."""
        return codec.save(self._buffer, path, quality=quality)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def rotate(self, kind: Rotation | str) -> TransformOutcome:
        """Rotate by a quarter turn multiple or flip along an axis.

        Raises:
            UnsupportedTransformError: If ``kind`` is not a Rotation
        """
        rotation = Rotation.parse(kind)
        transform, dst_w, dst_h = rotation_transform(rotation, self._width, self._height)
        self._replace(self._buffer.affine_draw(transform, dst_w, dst_h), f"rotate({rotation})")
        return TransformOutcome.APPLIED

    def crop(self, x: int, y: int, width: int, height: int) -> TransformOutcome:
        """Keep only the pixels in ``[x, x+width) x [y, y+height)``."""
        if (x, y, width, height) == (0, 0, self._width, self._height):
            return TransformOutcome.UNCHANGED

        if x < 0 or y < 0 or width <= 0 or height <= 0:
            return self._reject("crop", f"rectangle ({x}, {y}, {width}, {height}) is empty or has a negative origin")
        if x + width > self._width or y + height > self._height:
            return self._reject(
                "crop",
                f"rectangle ({x}, {y}, {width}, {height}) exceeds {self._width}x{self._height}",
            )

        self._replace(self._buffer.subimage(x, y, width, height), "crop")
        return TransformOutcome.APPLIED

    def resize(self, width: int, height: int) -> TransformOutcome:
        """Downscale to exactly ``width x height`` by progressive halving."""
        if (width, height) == (self._width, self._height):
            return TransformOutcome.UNCHANGED

        rejection = self._check_downscale(width, height)
        if rejection is not None:
            return self._reject("resize", rejection)

        self._replace(self._downscale(self._buffer, width, height), "resize")
        return TransformOutcome.APPLIED

    def resize_fit(self, width: int, height: int) -> TransformOutcome:
        """Fill exactly ``width x height``: center-crop to the target aspect ratio, then downscale."""
        if (width, height) == (self._width, self._height):
            return TransformOutcome.UNCHANGED

        rejection = self._check_downscale(width, height)
        if rejection is not None:
            return self._reject("resize_fit", rejection)

        rect = fit_crop_rect(self._width, self._height, width, height)
        if rect == CropRect(0, 0, self._width, self._height):
            cropped = self._buffer
        else:
            cropped = self._buffer.subimage(*rect)
            self._log.debug(f"resize_fit: cropping to {rect.width}x{rect.height} at ({rect.x}, {rect.y})")

        try:
            result = self._downscale(cropped, width, height)
        except BaseException:
            if cropped is not self._buffer:
                cropped.release()
            raise

        if cropped is not self._buffer and cropped is not result:
            cropped.release()
        self._replace(result, "resize_fit")
        return TransformOutcome.APPLIED

    def resize_to_width(self, width: int) -> TransformOutcome:
        """Downscale to ``width``, deriving the height from the current aspect ratio."""
        if width <= 0:
            return self._reject("resize_to_width", f"width must be positive, got {width}")
        return self.resize(width, round_half_up(width * self._height / self._width))

    def resize_to_height(self, height: int) -> TransformOutcome:
        """Downscale to ``height``, deriving the width from the current aspect ratio."""
        if height <= 0:
            return self._reject("resize_to_height", f"height must be positive, got {height}")
        return self.resize(round_half_up(self._width * height / self._height), height)

    def resize_to_width_height(self, width: int, height: int) -> TransformOutcome:
        """Shrink to fit within ``width x height`` keeping the aspect ratio.

        The height check runs against the dimensions left by the width step.
        """
        outcomes: list[TransformOutcome] = []
        if width < self._width:
            outcomes.append(self.resize_to_width(width))
        if height < self._height:
            outcomes.append(self.resize_to_height(height))

        if TransformOutcome.REJECTED in outcomes:
            return TransformOutcome.REJECTED
        if TransformOutcome.APPLIED in outcomes:
            return TransformOutcome.APPLIED
        return TransformOutcome.UNCHANGED

    def resize_to(self, width: int, height: int) -> TransformOutcome:
        """Place the image unscaled on a ``width x height`` canvas.

        Centered along axes where the canvas is larger, clipped from the
        top-left where it is smaller.
        """
        if (width, height) == (self._width, self._height):
            return TransformOutcome.UNCHANGED
        if width <= 0 or height <= 0:
            return self._reject("resize_to", f"canvas size must be positive, got {width}x{height}")

        x = canvas_offset(self._width, width)
        y = canvas_offset(self._height, height)
        self._replace(self._buffer.place(width, height, x, y), "resize_to")
        return TransformOutcome.APPLIED

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_downscale(self, width: int, height: int) -> str | None:
        if width <= 0 or height <= 0:
            return f"target {width}x{height} must be positive"
        if width > self._width or height > self._height:
            return f"target {width}x{height} would upscale {self._width}x{self._height}"
        return None

    def _downscale(self, source: PixelBuffer, width: int, height: int) -> PixelBuffer:
        """Progressively halve ``source`` down to ``width x height``.

        Intermediates are released as soon as the next one exists; ``source``
        itself is never released here, so up to three generations are live
        during a step. Returns ``source`` when no step is needed.
        """
        current = source
        try:
            for step_w, step_h in halving_plan(source.width, source.height, width, height):
                resampled = current.resample(step_w, step_h, self.options.resample_filter)
                self._log.debug(f"resize step: {current.width}x{current.height} -> {step_w}x{step_h}")
                if current is not source:
                    current.release()
                current = resampled
        except BaseException:
            if current is not source:
                current.release()
            raise
        return current

    def _replace(self, result: PixelBuffer, operation: str) -> None:
        previous = self._buffer
        old_size = (self._width, self._height)

        self._buffer = result
        self._width = result.width
        self._height = result.height

        if previous is not result:
            previous.release()
        self._log.debug(
            f"{operation}: {old_size[0]}x{old_size[1]} -> {self._width}x{self._height}"
        )

    def _reject(self, operation: str, reason: str) -> TransformOutcome:
        if self.options.strict:
            raise InvalidGeometryError(f"{operation}: {reason}")
        self._log.warning(f"{operation} rejected: {reason}")
        return TransformOutcome.REJECTED

    def __repr__(self) -> str:
        mode = "RGBA" if self.has_alpha else "RGB"
        return f"Transformer({self._width}x{self._height}, {mode})"
