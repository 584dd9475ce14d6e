"""Pydantic configuration models and result enums shared by the transformer."""

from enum import StrEnum
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field


class TransformOutcome(StrEnum):
    """What a geometry-taking operation did to the owned buffer."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


class TransformerOptions(BaseModel):
    """Behavioural switches for a Transformer.

    Attributes:
        strict: Raise InvalidGeometryError instead of ignoring rejected
            crop/resize requests
        collapse_opaque_alpha: Treat an RGBA source whose alpha is 255
            everywhere as opaque RGB for the Transformer's whole lifetime
        resample_filter: Smooth filter used for every progressive resize step
    """

    strict: bool = Field(default=False, description="Raise on invalid geometry instead of ignoring it")
    collapse_opaque_alpha: bool = Field(
        default=True,
        description="Decide the channel mode once from the source's actual opacity",
    )
    resample_filter: Literal["bicubic", "bilinear", "lanczos"] = Field(
        default="bicubic",
        description="Interpolation filter for resize steps",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)
