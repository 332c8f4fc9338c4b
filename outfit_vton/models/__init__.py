"""Data models for the outfit try-on pipeline."""

from .images import (
    CanonicalImage,
    ImageReference,
    InlineImage,
    LocalImage,
    MediaType,
    RemoteImage,
    parse_image_reference,
)
from .garment import GarmentItem
from .tryon import (
    OutfitFailure,
    OutfitResult,
    OutfitSuccess,
    PromptVersion,
    TryOnFailure,
    TryOnRequest,
    TryOnResult,
    TryOnSuccess,
)

__all__ = [
    "CanonicalImage",
    "ImageReference",
    "InlineImage",
    "LocalImage",
    "MediaType",
    "RemoteImage",
    "parse_image_reference",
    "GarmentItem",
    "OutfitFailure",
    "OutfitResult",
    "OutfitSuccess",
    "PromptVersion",
    "TryOnFailure",
    "TryOnRequest",
    "TryOnResult",
    "TryOnSuccess",
]
