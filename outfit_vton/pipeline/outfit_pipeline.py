"""Layered outfit try-on pipeline.

Flow per garment:
1. Acquire and normalize the garment image and the current base photo
2. Build the [garment, person, instruction] request
3. Call the image model and interpret its response (one retry on a miss)

Garments are applied strictly in order; each step's output image becomes
the base photo of the next step.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from google.genai import types

from ..config import PipelineConfig
from ..errors import LayeringErrorKind, TryOnError
from ..models.garment import GarmentItem
from ..models.images import (
    CanonicalImage,
    InlineImage,
    LocalImage,
    RemoteImage,
    describe_reference,
    parse_image_reference,
)
from ..models.tryon import (
    OutfitFailure,
    OutfitSuccess,
    PromptVersion,
    TryOnFailure,
    TryOnRequest,
    TryOnSuccess,
)
from ..services.gemini_client import GeminiClient, ImageGenerator
from ..services.image_loader import ImageLoader
from .request_builder import build_generation_parts
from .response_interpreter import ResponseInterpreter


logger = logging.getLogger(__name__)

ImageRef = InlineImage | LocalImage | RemoteImage
ApplyGarment = Callable[[ImageRef, GarmentItem], Awaitable[TryOnSuccess | TryOnFailure]]


def should_tolerate_failure(step_index: int, any_prior_success: bool) -> bool:
    """Keep the layers built so far instead of failing the whole outfit."""
    return step_index > 0 and any_prior_success


@dataclass
class LayeringState:
    """Accumulator threaded through the garment fold."""
    base: ImageRef
    applied: list[str] = field(default_factory=list)

    def advance(self, item: GarmentItem, result: TryOnSuccess) -> "LayeringState":
        return LayeringState(
            base=InlineImage.from_data_url(result.encoded_image),
            applied=[*self.applied, item.display_name],
        )


async def layer_garments(
    base_photo: ImageRef,
    items: Sequence[GarmentItem],
    apply_garment: ApplyGarment,
) -> OutfitSuccess | OutfitFailure:
    """Fold ``apply_garment`` over ``items``, starting from ``base_photo``.

    Stops at the first failure: returns the accumulated image when an
    earlier garment succeeded, otherwise a failure for the whole outfit.
    """
    state = LayeringState(base=base_photo)

    for index, item in enumerate(items):
        logger.info("Applying item %d/%d: %s", index + 1, len(items), item.display_name)
        logger.debug("Using base image: %s", describe_reference(state.base))

        result = await apply_garment(state.base, item)

        if isinstance(result, TryOnFailure):
            logger.error("Failed at item %d/%d: %s", index + 1, len(items), result.reason)
            if should_tolerate_failure(index, bool(state.applied)):
                logger.info("Returning partial result from %d previous layer(s)", len(state.applied))
                return OutfitSuccess(
                    image_url=state.base.to_url(),
                    applied_items=state.applied,
                    skipped_item=item.display_name,
                    partial_failure_reason=result.reason,
                )
            return OutfitFailure(
                reason=f"Failed to apply {item.display_name}: {result.reason}",
                failed_item=item.display_name,
                cause=result,
            )

        state = state.advance(item, result)
        logger.info("Successfully applied item %d/%d", index + 1, len(items))

    return OutfitSuccess(image_url=state.base.to_url(), applied_items=state.applied)


class TryOnPipeline:
    """Single-garment and layered-outfit try-on over the Gemini image model."""

    def __init__(
        self,
        config: PipelineConfig,
        generator: ImageGenerator | None = None,
        loader: ImageLoader | None = None,
    ):
        self.config = config

        # Initialize services
        self.loader = loader or ImageLoader(config=config.images, asset_root=config.asset_root)
        self.generator = generator or GeminiClient(config=config.gemini, api_key=config.gemini_api_key)
        self.interpreter = ResponseInterpreter(generator=self.generator, loader=self.loader)

    async def generate_single_tryon(self, request: TryOnRequest) -> TryOnSuccess | TryOnFailure:
        """Apply one garment onto one base photo.

        Every acquisition, network and generation error is returned as a
        TryOnFailure; nothing is raised for expected failure modes.
        """
        try:
            garment, subject = await self._acquire_pair(request)
            parts = build_generation_parts(request, garment, subject)
            response = await self.generator.generate(parts)
        except TryOnError as e:
            logger.error("Try-on for %s failed (%s): %s", request.garment_name, e.kind.value, e.message)
            return TryOnFailure.from_error(e)

        # The retry reuses the same images with the image-only instruction
        retry_request = request.model_copy(update={"prompt_version": PromptVersion.IMAGE_ONLY})
        retry_parts = build_generation_parts(retry_request, garment, subject)
        return await self.interpreter.interpret(response, parts, retry_parts=retry_parts)

    async def generate_layered_outfit(
        self,
        base_photo: ImageRef | str,
        items: Sequence[GarmentItem],
    ) -> OutfitSuccess | OutfitFailure:
        """Layer ``items`` onto ``base_photo`` one at a time, in order.

        With no items the photo is returned exactly as given, unparsed.
        """
        logger.info("Starting outfit generation with %d item(s)", len(items))
        if not items:
            logger.info("No items to apply, returning original photo")
            url = base_photo if isinstance(base_photo, str) else base_photo.to_url()
            return OutfitSuccess(image_url=url)

        try:
            base = parse_image_reference(base_photo)
        except TryOnError as e:
            failure = TryOnFailure.from_error(e)
            return OutfitFailure(
                reason=f"Invalid base photo: {failure.reason}",
                error_kind=LayeringErrorKind.INVALID_BASE_PHOTO.value,
                failed_item="base photo",
                cause=failure,
            )

        result = await layer_garments(base, items, self._apply_garment)
        logger.info("Outfit generation finished: %s", result.status)
        return result

    async def generate_batch(self, requests: Sequence[TryOnRequest]) -> list[TryOnSuccess | TryOnFailure]:
        """Run independent single-garment requests concurrently."""
        return list(await asyncio.gather(*(self.generate_single_tryon(r) for r in requests)))

    async def _apply_garment(self, base: ImageRef, item: GarmentItem) -> TryOnSuccess | TryOnFailure:
        request = TryOnRequest(
            base_photo=base,
            garment_image=item.image_reference,
            garment_name=item.display_name,
            garment_description=item.description(),
        )
        return await self.generate_single_tryon(request)

    async def _acquire_pair(self, request: TryOnRequest) -> tuple[CanonicalImage, CanonicalImage]:
        """Fetch garment and base photo concurrently; both finish before returning."""
        garment, subject = await asyncio.gather(
            self.loader.acquire(request.garment_image),
            self.loader.acquire(request.base_photo),
            return_exceptions=True,
        )
        for outcome in (garment, subject):
            if isinstance(outcome, BaseException):
                raise outcome
        return garment, subject

    async def close(self):
        """Release the HTTP client."""
        await self.loader.close()
