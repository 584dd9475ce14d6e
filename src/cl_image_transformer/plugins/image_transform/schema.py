"""Image transform pipeline parameter and output schemas."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from ...common.geometry import Rotation
from ...common.schemas import TransformOutcome

ImageFormat = Literal["jpg", "jpeg", "png", "webp", "gif", "bmp", "tif", "tiff"]


class RotateStep(BaseModel):
    op: Literal["rotate"] = "rotate"
    rotation: Rotation


class CropStep(BaseModel):
    op: Literal["crop"] = "crop"
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ResizeStep(BaseModel):
    """Downscale to exactly width x height (aspect ratio not preserved)."""

    op: Literal["resize"] = "resize"
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ResizeFitStep(BaseModel):
    """Center-crop to the target aspect ratio, then downscale."""

    op: Literal["resize_fit"] = "resize_fit"
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ResizeToWidthStep(BaseModel):
    op: Literal["resize_to_width"] = "resize_to_width"
    width: int = Field(..., gt=0)


class ResizeToHeightStep(BaseModel):
    op: Literal["resize_to_height"] = "resize_to_height"
    height: int = Field(..., gt=0)


class ResizeToWidthHeightStep(BaseModel):
    op: Literal["resize_to_width_height"] = "resize_to_width_height"
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ResizeToStep(BaseModel):
    """Place the image unscaled on a canvas of the given size."""

    op: Literal["resize_to"] = "resize_to"
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


TransformStep = Annotated[
    RotateStep
    | CropStep
    | ResizeStep
    | ResizeFitStep
    | ResizeToWidthStep
    | ResizeToHeightStep
    | ResizeToWidthHeightStep
    | ResizeToStep,
    Field(discriminator="op"),
]


class ImageTransformParams(BaseModel):
    """Parameters for a file-to-file transform pipeline.

    Attributes:
        input_path: Path to the source image
        output_path: Path for the transformed image
        steps: Operations applied in order
        format: Output format; derived from output_path's extension when None
        quality: Encoder quality for jpg/webp (1-100)
        strict: Fail on rejected geometry instead of skipping the step
    """

    input_path: str = Field(..., description="Path to input image")
    output_path: str = Field(..., description="Path for output image")
    steps: list[TransformStep] = Field(..., min_length=1, description="Operations applied in order")
    format: ImageFormat | None = Field(default=None, description="Output format override")
    quality: int | None = Field(default=None, ge=1, le=100, description="Encoder quality")
    strict: bool = Field(default=False, description="Raise on rejected geometry")


class ImageTransformOutput(BaseModel):
    output_path: str
    width: int
    height: int
    outcomes: list[TransformOutcome] = Field(default_factory=list)
