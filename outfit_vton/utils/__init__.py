"""Pure helpers: content sniffing, normalization and product text cleanup."""

from .image_normalizer import normalize_image
from .image_sniffing import looks_like_html, sniff_media_type, verify_image_bytes
from .product_text import clean_product_name

__all__ = [
    "normalize_image",
    "looks_like_html",
    "sniff_media_type",
    "verify_image_bytes",
    "clean_product_name",
]
