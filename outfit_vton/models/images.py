"""Image reference and canonical image models."""

import base64
import re
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ImageAcquisitionError, ImageErrorKind


DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


class MediaType(str, Enum):
    """Image formats the pipeline accepts and sends to the model."""
    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"


class InlineImage(BaseModel):
    """Image carried inline as a base64 payload with its declared media type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    media_type: str
    data: str  # base64, not yet decoded

    @classmethod
    def from_data_url(cls, value: str) -> "InlineImage":
        match = DATA_URL_PATTERN.match(value.strip())
        if not match:
            raise ImageAcquisitionError(
                "Invalid data URL format (expected data:<type>;base64,<payload>)",
                ImageErrorKind.INVALID_REFERENCE,
            )
        return cls(media_type=match.group(1).strip().lower(), data=match.group(2))

    def to_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class LocalImage(BaseModel):
    """Image stored under the trusted asset root."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    path: str

    def to_url(self) -> str:
        return self.path


class RemoteImage(BaseModel):
    """Image hosted at an http(s) URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    url: str

    def to_url(self) -> str:
        return self.url


ImageReference = Annotated[
    Union[InlineImage, LocalImage, RemoteImage],
    Field(discriminator="kind"),
]


def parse_image_reference(value: "str | InlineImage | LocalImage | RemoteImage"):
    """Turn a caller-supplied string into a typed image reference.

    Strings are classified by prefix: ``data:`` URLs are inline payloads,
    ``http://``/``https://`` are remote, and a leading ``/`` is a path under
    the asset root. Anything else is rejected.
    """
    if isinstance(value, (InlineImage, LocalImage, RemoteImage)):
        return value

    text = value.strip()
    if text.startswith("data:"):
        return InlineImage.from_data_url(text)
    if text.startswith(("http://", "https://")):
        return RemoteImage(url=text)
    if text.startswith("/"):
        return LocalImage(path=text)

    raise ImageAcquisitionError(
        f"Invalid image reference format: {text[:60]}",
        ImageErrorKind.INVALID_REFERENCE,
    )


def describe_reference(reference: "InlineImage | LocalImage | RemoteImage") -> str:
    """Short, log-safe preview of a reference (never the full payload)."""
    return reference.to_url()[:60]


class CanonicalImage(BaseModel):
    """Validated image bytes whose media type was sniffed from the content."""

    model_config = ConfigDict(frozen=True)

    media_type: MediaType
    data: bytes

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.media_type.value};base64,{self.base64}"
