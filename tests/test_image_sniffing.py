"""Unit tests for magic-number sniffing and HTML detection."""

import pytest

from outfit_vton.errors import ImageAcquisitionError, ImageErrorKind
from outfit_vton.models.images import MediaType
from outfit_vton.utils.image_sniffing import looks_like_html, sniff_media_type, verify_image_bytes

from conftest import make_image_bytes


class TestSniffMediaType:
    """Tests for signature detection."""

    @pytest.mark.parametrize("fmt,expected", [
        ("PNG", MediaType.PNG),
        ("JPEG", MediaType.JPEG),
        ("GIF", MediaType.GIF),
        ("WEBP", MediaType.WEBP),
    ])
    def test_detects_encoded_images(self, fmt, expected):
        """Real encoded images are recognised by their leading bytes."""
        assert sniff_media_type(make_image_bytes(fmt=fmt)) == expected

    def test_riff_without_webp_marker(self):
        """A RIFF container that is not WebP (e.g. WAV) is not an image."""
        assert sniff_media_type(b"RIFF\x24\x00\x00\x00WAVEfmt ") is None

    def test_short_payload(self):
        assert sniff_media_type(b"\xff") is None


class TestLooksLikeHtml:
    """Tests for web-page detection."""

    @pytest.mark.parametrize("payload", [
        b"<!DOCTYPE html><html><body>Not found</body></html>",
        b"   \n<html lang='en'>",
        b"\xef\xbb\xbfsome preamble <BODY>",
        b"<?xml version='1.0'?><error/>",
    ])
    def test_markup_detected(self, payload):
        assert looks_like_html(payload)

    def test_binary_garbage_is_not_html(self):
        assert not looks_like_html(bytes(range(1, 60)))


class TestVerifyImageBytes:
    """Tests for the validation decision."""

    def test_sniffed_type_wins_over_declared(self, png_bytes):
        """PNG bytes served as image/jpeg are reported as PNG."""
        assert verify_image_bytes(png_bytes, "image/jpeg") == MediaType.PNG

    def test_html_is_distinct_error(self):
        """A 404 page yields html_instead_of_image, not a generic error."""
        with pytest.raises(ImageAcquisitionError) as exc_info:
            verify_image_bytes(b"<!DOCTYPE html><html></html>", "image/jpeg")

        assert exc_info.value.kind == ImageErrorKind.HTML_INSTEAD_OF_IMAGE

    def test_unknown_bytes_report_advertised_type(self):
        with pytest.raises(ImageAcquisitionError) as exc_info:
            verify_image_bytes(b"\x00\x01\x02\x03garbage", "application/octet-stream")

        assert exc_info.value.kind == ImageErrorKind.UNSUPPORTED_IMAGE
        assert "application/octet-stream" in exc_info.value.message

    def test_lying_image_content_type(self):
        """Content type claims an image but the bytes disagree."""
        with pytest.raises(ImageAcquisitionError) as exc_info:
            verify_image_bytes(b"\x00\x01\x02\x03garbage", "image/png; charset=binary")

        assert exc_info.value.kind == ImageErrorKind.UNSUPPORTED_IMAGE
        assert "claims image/png" in exc_info.value.message
