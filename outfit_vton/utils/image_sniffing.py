"""Content sniffing: decide what an image really is from its leading bytes."""

from ..errors import ImageAcquisitionError, ImageErrorKind
from ..models.images import MediaType


HTML_PREVIEW_BYTES = 200
HTML_MARKERS = ("<!doctype", "<html", "<body")


def sniff_media_type(data: bytes) -> MediaType | None:
    """Return the format matching the magic-number signature, if any."""
    if data[:2] == b"\xff\xd8":
        return MediaType.JPEG
    if data[:4] == b"\x89PNG":
        return MediaType.PNG
    if data[:4] == b"GIF8":
        return MediaType.GIF
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return MediaType.WEBP
    return None


def looks_like_html(data: bytes) -> bool:
    """True when the payload is a web page (typically a dead product-image link)."""
    preview = data[:HTML_PREVIEW_BYTES].decode("utf-8", errors="ignore")
    if preview.lstrip().startswith("<"):
        return True
    lowered = preview.lower()
    return any(marker in lowered for marker in HTML_MARKERS)


def verify_image_bytes(data: bytes, advertised_type: str | None = None, source: str = "") -> MediaType:
    """Validate bytes by signature; the sniffed type always wins over metadata.

    Raises:
        ImageAcquisitionError: ``html_instead_of_image`` for markup,
            ``unsupported_image`` for anything else unrecognised.
    """
    media_type = sniff_media_type(data)
    if media_type is not None:
        return media_type

    where = f": {source[:80]}" if source else ""
    if looks_like_html(data):
        raise ImageAcquisitionError(
            f"Got a web page instead of an image (likely a dead or redirected link){where}",
            ImageErrorKind.HTML_INSTEAD_OF_IMAGE,
        )

    advertised = (advertised_type or "").split(";")[0].strip().lower()
    if advertised.startswith("image/"):
        message = f"Content type claims {advertised} but the bytes are not a supported image"
    else:
        message = (
            "Unsupported or corrupt image. Expected JPEG, PNG, GIF, or WebP "
            f"(content type: {advertised or 'unknown'})"
        )
    raise ImageAcquisitionError(message + where, ImageErrorKind.UNSUPPORTED_IMAGE)
