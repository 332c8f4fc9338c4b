"""Builds the ordered multi-part request sent to the image model."""

from google.genai import types

from ..models.images import CanonicalImage
from ..models.tryon import PromptVersion, TryOnRequest
from ..utils.product_text import clean_product_name


IMAGE_ONLY_DIRECTIVE = (
    "IMPORTANT: Return ONLY the generated image. Do not return any text, "
    "captions, explanations or questions."
)

TRYON_INSTRUCTION = """You are a professional virtual try-on system. The first image contains a clothing item ({item}). The second image contains a person.

Task: Generate a realistic virtual try-on image where the person from the second image is wearing the clothing item from the first image.

Requirements:
1. Keep the person's face, hair, skin tone, body proportions and pose exactly as in the second image
2. Keep any clothing the person already wears unless the new item replaces it
3. Apply the clothing item from the first image with realistic draping, fit and fabric texture
4. Match lighting and shadows to the second image so the item looks naturally worn
5. Produce a high-quality, professional e-commerce style photo
6. Output a full-body or appropriately cropped image showing the person wearing the item

Generate the virtual try-on image now."""


def build_instruction(
    garment_name: str,
    garment_description: str | None = None,
    prompt_version: PromptVersion = PromptVersion.STANDARD,
) -> str:
    """Fill the try-on template for one garment."""
    item = clean_product_name(garment_name)
    if garment_description:
        item = f"{item}: {garment_description}"

    instruction = TRYON_INSTRUCTION.format(item=item)
    if prompt_version == PromptVersion.IMAGE_ONLY:
        instruction = f"{instruction}\n\n{IMAGE_ONLY_DIRECTIVE}"
    return instruction


def build_generation_parts(
    request: TryOnRequest,
    garment: CanonicalImage,
    subject: CanonicalImage,
) -> list[types.Part]:
    """Return ``[garment image, subject image, instruction]``.

    The garment must come first: the instruction text refers to the images
    by position.
    """
    return [
        types.Part.from_bytes(data=garment.data, mime_type=garment.media_type.value),
        types.Part.from_bytes(data=subject.data, mime_type=subject.media_type.value),
        types.Part.from_text(
            text=build_instruction(
                request.garment_name,
                request.garment_description,
                request.prompt_version,
            )
        ),
    ]


def apply_retry_directive(parts: list[types.Part]) -> list[types.Part]:
    """Copy of ``parts`` with the image-only directive added to the first text part.

    When no text part exists, the directive is appended as a new part.
    Image parts are shared, not copied.
    """
    retry_parts = list(parts)
    for index, part in enumerate(retry_parts):
        if part.text is not None:
            retry_parts[index] = types.Part.from_text(text=f"{part.text}\n\n{IMAGE_ONLY_DIRECTIVE}")
            return retry_parts

    retry_parts.append(types.Part.from_text(text=IMAGE_ONLY_DIRECTIVE))
    return retry_parts
