"""Image transform pipeline algorithm."""

from .image_transform import apply_step, image_transform

__all__ = ["apply_step", "image_transform"]
