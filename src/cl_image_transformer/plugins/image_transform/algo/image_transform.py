"""Pure image transform pipeline logic (single file)."""

from collections.abc import Sequence
from pathlib import Path

from ....common import codec
from ....common.schemas import TransformerOptions, TransformOutcome
from ....transformer import Transformer
from ....utils.profiling import timed
from ..schema import (
    CropStep,
    ImageTransformOutput,
    ResizeFitStep,
    ResizeStep,
    ResizeToHeightStep,
    ResizeToStep,
    ResizeToWidthHeightStep,
    ResizeToWidthStep,
    RotateStep,
    TransformStep,
)


def apply_step(transformer: Transformer, step: TransformStep) -> TransformOutcome:
    """Dispatch one validated step model to the matching Transformer operation."""
    match step:
        case RotateStep():
            return transformer.rotate(step.rotation)
        case CropStep():
            return transformer.crop(step.x, step.y, step.width, step.height)
        case ResizeStep():
            return transformer.resize(step.width, step.height)
        case ResizeFitStep():
            return transformer.resize_fit(step.width, step.height)
        case ResizeToWidthStep():
            return transformer.resize_to_width(step.width)
        case ResizeToHeightStep():
            return transformer.resize_to_height(step.height)
        case ResizeToWidthHeightStep():
            return transformer.resize_to_width_height(step.width, step.height)
        case ResizeToStep():
            return transformer.resize_to(step.width, step.height)
    raise TypeError(f"Unknown transform step: {step!r}")


@timed
def image_transform(
    *,
    input_path: str | Path,
    output_path: str | Path,
    steps: Sequence[TransformStep],
    format: str | None = None,
    quality: int | None = None,
    strict: bool = False,
) -> ImageTransformOutput:
    """
    Decode an image, apply the steps in order and write the result.

    Framework-agnostic, single-image operation.

    Args:
        input_path: Path to input image
        output_path: Path to output image
        steps: Validated step models (see schema.TransformStep)
        format: Output format; derived from output_path's extension when None
        quality: Encoder quality for jpg/webp
        strict: Raise InvalidGeometryError on rejected steps

    Returns:
        ImageTransformOutput with the final size and per-step outcomes

    Raises:
        FileNotFoundError: If the input image or output directory does not exist
        InvalidGeometryError: In strict mode, if a step is rejected
        UnsupportedFormatError: If no encoder matches the output format
        OSError: If Pillow fails to read the image
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    if not output_path.parent.exists():
        raise FileNotFoundError(f"Output directory does not exist: {output_path.parent}")

    transformer = Transformer.open(input_path, options=TransformerOptions(strict=strict))
    outcomes = [apply_step(transformer, step) for step in steps]

    if format is None:
        _ = transformer.save_to(output_path, quality=quality)
    else:
        _ = output_path.write_bytes(codec.encode(transformer.buffer, format, quality=quality))

    return ImageTransformOutput(
        output_path=str(output_path),
        width=transformer.width,
        height=transformer.height,
        outcomes=outcomes,
    )
