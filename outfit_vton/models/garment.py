"""Garment item models supplied by product search."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import TryOnError
from .images import ImageReference, parse_image_reference


class GarmentItem(BaseModel):
    """A retail product to be layered onto the base photo."""

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(description="Product title as shown to the user")
    image_reference: ImageReference
    product_url: str

    # Optional merchandising details
    price: float | None = None
    currency: str | None = None
    brand: str | None = None
    retailer: str | None = None
    category: str | None = Field(default=None, description="e.g., 'dress', 'outerwear', 'shoes'")

    @field_validator("image_reference", mode="before")
    @classmethod
    def _parse_reference(cls, value):
        if isinstance(value, str):
            try:
                return parse_image_reference(value)
            except TryOnError as e:
                raise ValueError(e.message) from e
        return value

    def description(self) -> str | None:
        """Short description used in the prompt, e.g. 'Aritzia dress'."""
        text = f"{self.brand or self.retailer or ''} {self.category or ''}".strip()
        return text or None
