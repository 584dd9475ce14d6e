"""Image transform plugin."""

from .algo.image_transform import image_transform
from .schema import ImageTransformOutput, ImageTransformParams, TransformStep

__all__ = ["image_transform", "ImageTransformParams", "ImageTransformOutput", "TransformStep"]
