"""Extracts a generated image from a loosely-shaped model response.

The model sometimes answers with a caption or a refusal instead of an
image. When a response carries no image, the request is resent once with
a stricter image-only directive; a second miss is reported as either a
text-only answer (with an excerpt) or an unparseable response.
"""

import base64
import logging
from dataclasses import dataclass

from google.genai import types

from ..errors import (
    GenerationErrorKind,
    GenerationFailure,
    ImageAcquisitionError,
    RemoteCapabilityError,
    RemoteErrorKind,
    TryOnError,
)
from ..models.response import (
    FileReferencePart,
    InlineImagePart,
    TextPart,
    UnrecognizedPart,
    decode_part,
)
from ..models.tryon import TryOnFailure, TryOnSuccess
from ..services.gemini_client import ImageGenerator
from ..services.image_loader import ImageLoader
from ..utils.image_sniffing import verify_image_bytes
from .request_builder import apply_retry_directive


logger = logging.getLogger(__name__)

TEXT_EXCERPT_LENGTH = 150


@dataclass
class ScanOutcome:
    """What one pass over a response's parts found."""
    image_url: str | None = None
    text: str | None = None


def to_data_url(media_type: str, data: bytes) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def response_parts(response: types.GenerateContentResponse) -> list[types.Part]:
    """Return the first candidate's parts or raise a shape-specific error."""
    if not response.candidates:
        feedback = response.prompt_feedback
        block_reason = feedback.block_reason if feedback is not None else None
        detail = f" (blocked: {block_reason})" if block_reason else ""
        raise RemoteCapabilityError(
            f"No candidates received from the image model{detail}",
            RemoteErrorKind.NO_CANDIDATES,
        )

    content = response.candidates[0].content
    if content is None or content.parts is None:
        raise RemoteCapabilityError(
            "No content parts in response candidate",
            RemoteErrorKind.NO_CONTENT_PARTS,
        )
    if len(content.parts) == 0:
        raise RemoteCapabilityError("Empty parts array in response", RemoteErrorKind.EMPTY_PARTS)

    return content.parts


class ResponseInterpreter:
    """Turns model responses into TryOnResults, retrying once on a miss."""

    def __init__(self, generator: ImageGenerator, loader: ImageLoader):
        self.generator = generator
        self.loader = loader

    async def interpret(
        self,
        response: types.GenerateContentResponse,
        parts: list[types.Part],
        retry_parts: list[types.Part] | None = None,
    ) -> TryOnSuccess | TryOnFailure:
        """Interpret ``response`` to the request ``parts``.

        Args:
            response: The first model response
            parts: The exact parts that produced it
            retry_parts: Parts for the single retry; defaults to ``parts``
                with the image-only directive added

        Returns:
            TryOnSuccess with a data URL, or TryOnFailure with a reason
        """
        try:
            first = await self.scan(response)
            if first.image_url:
                return TryOnSuccess(encoded_image=first.image_url)

            logger.warning("No image in model response; retrying once with image-only directive")
            if retry_parts is None:
                retry_parts = apply_retry_directive(parts)
            retry_response = await self.generator.generate(retry_parts)
            retry = await self.scan(retry_response)
            if retry.image_url:
                logger.info("Retry recovered an image")
                return TryOnSuccess(encoded_image=retry.image_url)

            raise self._no_image_error(retry.text or first.text)
        except TryOnError as e:
            logger.error("Try-on generation failed (%s): %s", e.kind.value, e.message)
            return TryOnFailure.from_error(e)

    async def scan(self, response: types.GenerateContentResponse) -> ScanOutcome:
        """Walk the parts in order; stop at the first usable image."""
        outcome = ScanOutcome()

        for index, raw_part in enumerate(response_parts(response)):
            part = decode_part(raw_part)

            if isinstance(part, TextPart):
                if outcome.text is None:
                    outcome.text = part.text
                logger.warning("Model returned text in part %d: %s", index, part.text[:TEXT_EXCERPT_LENGTH])

            elif isinstance(part, InlineImagePart):
                outcome.image_url = to_data_url(part.media_type, part.data)
                return outcome

            elif isinstance(part, FileReferencePart):
                image_url = await self._download_file_reference(part)
                if image_url:
                    outcome.image_url = image_url
                    return outcome

            elif isinstance(part, UnrecognizedPart):
                logger.debug("Skipping part %d: %s", index, part.summary)

        return outcome

    async def _download_file_reference(self, part: FileReferencePart) -> str | None:
        if not part.is_fetchable:
            logger.warning("Skipping non-fetchable file reference: %s", part.uri[:80])
            return None

        try:
            data, content_type = await self.loader.fetch_remote_bytes(part.uri)
            media_type = verify_image_bytes(data, content_type or part.media_type, source=part.uri)
        except ImageAcquisitionError as e:
            logger.warning("Could not download file reference %s: %s", part.uri[:80], e.message)
            return None

        return to_data_url(media_type.value, data)

    def _no_image_error(self, text: str | None) -> GenerationFailure:
        if text:
            excerpt = text.strip()[:TEXT_EXCERPT_LENGTH]
            return GenerationFailure(
                f"Model returned only text instead of an image: {excerpt}",
                GenerationErrorKind.TEXT_ONLY,
            )
        return GenerationFailure(
            "No image generated in response. The response shape could not be parsed.",
            GenerationErrorKind.UNPARSEABLE,
        )
