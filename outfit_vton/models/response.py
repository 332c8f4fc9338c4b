"""Closed set of response part shapes returned by the image model."""

from dataclasses import dataclass

from google.genai import types


@dataclass(frozen=True)
class TextPart:
    """Caption, explanation or refusal text."""
    text: str


@dataclass(frozen=True)
class InlineImagePart:
    """Generated image returned inline."""
    media_type: str
    data: bytes


@dataclass(frozen=True)
class FileReferencePart:
    """Generated image returned as a reference to a remote file."""
    uri: str
    media_type: str | None

    @property
    def is_fetchable(self) -> bool:
        return self.uri.startswith(("http://", "https://"))


@dataclass(frozen=True)
class UnrecognizedPart:
    """Anything else (function calls, empty parts, non-image blobs)."""
    summary: str


ResponsePart = TextPart | InlineImagePart | FileReferencePart | UnrecognizedPart


def decode_part(part: types.Part) -> ResponsePart:
    """Classify an SDK part by which payload field is populated.

    Image payloads are checked before text because the model may attach a
    caption to the same part. Reasoning ("thought") parts are never
    treated as output, so they cannot become a caption or a failure excerpt.
    """
    if part.thought:
        return UnrecognizedPart(summary="model reasoning trace")

    blob = part.inline_data
    if blob is not None and blob.data:
        media_type = (blob.mime_type or "image/png").lower()
        if media_type.startswith("image/"):
            return InlineImagePart(media_type=media_type, data=blob.data)
        return UnrecognizedPart(summary=f"inline data of type {media_type}")

    file_data = part.file_data
    if file_data is not None and file_data.file_uri:
        return FileReferencePart(uri=file_data.file_uri, media_type=file_data.mime_type)

    if part.text:
        return TextPart(text=part.text)

    return UnrecognizedPart(summary="part without text, inline data or file reference")
