"""Re-encode images to one bounded raster format before they reach the model."""

import io
import logging

from PIL import Image

from ..models.images import CanonicalImage, MediaType


logger = logging.getLogger(__name__)

FORMAT_MEDIA_TYPES = {
    "PNG": MediaType.PNG,
    "JPEG": MediaType.JPEG,
}


def _flatten(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white."""
    if img.mode == "P":
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA"):
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def normalize_image(
    image: CanonicalImage,
    max_dimension: int = 1024,
    target_format: str = "PNG",
    jpeg_quality: int = 90,
) -> CanonicalImage:
    """Bound the image size and unify its encoding.

    Images already in the target format, opaque RGB and within bounds are
    returned untouched. Larger images are downscaled preserving aspect ratio;
    nothing is ever enlarged. Normalization is best effort: if Pillow cannot
    decode or encode the image, the original is returned as-is.
    """
    target_media_type = FORMAT_MEDIA_TYPES[target_format]

    try:
        with Image.open(io.BytesIO(image.data)) as img:
            within_bounds = max(img.size) <= max_dimension
            if image.media_type == target_media_type and img.mode == "RGB" and within_bounds:
                return image

            img.seek(0)  # first frame of animations
            img.load()
            converted = _flatten(img)
            if not within_bounds:
                converted.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            output = io.BytesIO()
            if target_format == "JPEG":
                converted.save(output, format="JPEG", quality=jpeg_quality)
            else:
                converted.save(output, format="PNG", optimize=True)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("Image normalization failed, passing original bytes through: %s", e)
        return image

    logger.debug(
        "Normalized %s %s -> %s %s",
        image.media_type.value, img.size, target_media_type.value, converted.size,
    )
    return CanonicalImage(media_type=target_media_type, data=output.getvalue())
