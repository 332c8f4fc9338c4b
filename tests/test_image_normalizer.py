"""Unit tests for canonical re-encoding and size bounding."""

import io

from PIL import Image

from outfit_vton.models.images import CanonicalImage, MediaType
from outfit_vton.utils.image_normalizer import normalize_image

from conftest import make_image_bytes


def decode(image: CanonicalImage) -> Image.Image:
    return Image.open(io.BytesIO(image.data))


class TestPassThrough:
    """Already-canonical images are not touched."""

    def test_small_png_is_byte_identical(self, png_bytes):
        original = CanonicalImage(media_type=MediaType.PNG, data=png_bytes)

        result = normalize_image(original, max_dimension=1024)

        assert result.data == png_bytes
        assert result.media_type == MediaType.PNG

    def test_idempotent(self):
        """Normalizing a normalized image changes nothing."""
        source = CanonicalImage(media_type=MediaType.JPEG, data=make_image_bytes((40, 30), fmt="JPEG"))

        once = normalize_image(source, max_dimension=1024)
        twice = normalize_image(once, max_dimension=1024)

        assert twice.data == once.data

    def test_pixels_survive_round_trip(self, png_bytes):
        original = CanonicalImage(media_type=MediaType.PNG, data=png_bytes)

        result = normalize_image(original)

        assert decode(result).getpixel((0, 0)) == (200, 30, 30)


class TestReencoding:
    """Images outside the canonical form are converted."""

    def test_jpeg_becomes_png(self, jpeg_bytes):
        result = normalize_image(CanonicalImage(media_type=MediaType.JPEG, data=jpeg_bytes))

        assert result.media_type == MediaType.PNG
        assert result.data[:4] == b"\x89PNG"

    def test_transparency_flattened(self):
        """RGBA product cut-outs end up opaque RGB."""
        rgba = make_image_bytes((8, 8), fmt="PNG", mode="RGBA")

        result = normalize_image(CanonicalImage(media_type=MediaType.PNG, data=rgba))

        assert decode(result).mode == "RGB"

    def test_palette_gif_converted(self):
        gif = make_image_bytes((10, 10), fmt="GIF", mode="P", color=3)

        result = normalize_image(CanonicalImage(media_type=MediaType.GIF, data=gif))

        assert result.media_type == MediaType.PNG
        assert decode(result).size == (10, 10)

    def test_jpeg_target_format(self):
        rgba = make_image_bytes((8, 8), fmt="PNG", mode="RGBA")

        result = normalize_image(
            CanonicalImage(media_type=MediaType.PNG, data=rgba),
            target_format="JPEG",
        )

        assert result.media_type == MediaType.JPEG
        assert result.data[:2] == b"\xff\xd8"


class TestSizeBound:
    """Downscaling preserves aspect ratio and never enlarges."""

    def test_large_image_downscaled(self):
        big = make_image_bytes((2048, 1024))

        result = normalize_image(CanonicalImage(media_type=MediaType.PNG, data=big), max_dimension=1024)

        assert decode(result).size == (1024, 512)

    def test_portrait_bounded_by_height(self):
        tall = make_image_bytes((300, 1200), fmt="JPEG")

        result = normalize_image(CanonicalImage(media_type=MediaType.JPEG, data=tall), max_dimension=600)

        assert decode(result).size == (150, 600)

    def test_small_image_not_enlarged(self, jpeg_bytes):
        result = normalize_image(CanonicalImage(media_type=MediaType.JPEG, data=jpeg_bytes), max_dimension=1024)

        assert decode(result).size == (4, 4)


class TestFallback:
    """Normalization is best effort."""

    def test_corrupt_image_passes_through(self):
        """Bytes with a valid signature but broken body are returned unchanged."""
        corrupt = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
        original = CanonicalImage(media_type=MediaType.PNG, data=corrupt)

        result = normalize_image(original)

        assert result is original
