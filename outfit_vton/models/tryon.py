"""Try-on request and result models."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..errors import LayeringErrorKind, TryOnError
from .images import ImageReference


class PromptVersion(str, Enum):
    """Instruction variant sent to the model."""
    STANDARD = "standard"
    IMAGE_ONLY = "image_only"  # stricter re-prompt used for the single retry


class TryOnRequest(BaseModel):
    """One garment applied onto one base photo."""

    model_config = ConfigDict(frozen=True)

    base_photo: ImageReference
    garment_image: ImageReference
    garment_name: str
    garment_description: str | None = None
    prompt_version: PromptVersion = PromptVersion.STANDARD


class TryOnSuccess(BaseModel):
    status: Literal["success"] = "success"
    encoded_image: str  # data URL


class TryOnFailure(BaseModel):
    status: Literal["failure"] = "failure"
    reason: str
    error_kind: str
    error_category: str

    @classmethod
    def from_error(cls, error: TryOnError) -> "TryOnFailure":
        return cls(
            reason=error.message,
            error_kind=error.kind.value,
            error_category=error.category,
        )


TryOnResult = Annotated[Union[TryOnSuccess, TryOnFailure], Field(discriminator="status")]


class OutfitSuccess(BaseModel):
    """Final layered image, possibly partial when a later garment failed."""

    status: Literal["success"] = "success"
    image_url: str  # data URL, or the caller's photo when nothing was applied
    applied_items: list[str] = Field(default_factory=list)

    # Set only when a later garment failed and earlier layers were kept
    skipped_item: str | None = None
    partial_failure_reason: str | None = None

    @computed_field
    @property
    def is_partial(self) -> bool:
        return self.skipped_item is not None


class OutfitFailure(BaseModel):
    """Nothing usable could be produced: the first garment failed."""

    status: Literal["failure"] = "failure"
    reason: str
    error_kind: str = LayeringErrorKind.FIRST_ITEM_FAILED.value
    failed_item: str
    cause: TryOnFailure


OutfitResult = Annotated[Union[OutfitSuccess, OutfitFailure], Field(discriminator="status")]
