"""Image acquisition: inline payloads, asset-root files and remote URLs."""

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx

from ..config import ImageConfig
from ..errors import ImageAcquisitionError, ImageErrorKind
from ..models.images import CanonicalImage, InlineImage, LocalImage, RemoteImage
from ..utils.image_normalizer import normalize_image
from ..utils.image_sniffing import verify_image_bytes


logger = logging.getLogger(__name__)


def apply_host_query_params(url: str, host_params: dict[str, dict[str, str]]) -> str:
    """Append size/format params for known image hosts without overriding existing ones."""
    parsed = urlparse(url)
    params = host_params.get((parsed.hostname or "").lower())
    if not params:
        return url

    query = dict(parse_qsl(parsed.query, keep_blank_values=True))
    for key, value in params.items():
        if key in query:
            continue
        # An explicit height already bounds the size
        if key == "w" and "h" in query:
            continue
        query[key] = value

    return urlunparse(parsed._replace(query=urlencode(query)))


class ImageLoader:
    """Turns any image reference into a validated, normalized CanonicalImage."""

    def __init__(
        self,
        config: ImageConfig,
        asset_root: Path,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.asset_root = asset_root
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.fetch_timeout,
                follow_redirects=True,
            )
        return self._client

    async def acquire(self, reference: InlineImage | LocalImage | RemoteImage) -> CanonicalImage:
        """Load, verify and normalize one image.

        Raises:
            ImageAcquisitionError: when the reference cannot yield a usable image.
        """
        if isinstance(reference, InlineImage):
            data, declared = self._decode_inline(reference), reference.media_type
            source = "inline data"
        elif isinstance(reference, LocalImage):
            data, declared = await self._read_local(reference), None
            source = reference.path
        else:
            data, declared = await self._fetch_remote(reference.url)
            source = reference.url

        media_type = verify_image_bytes(data, declared, source=source)
        if declared and declared.split(";")[0].strip().lower() != media_type.value:
            logger.debug("Declared type %s disagrees with content (%s) for %s", declared, media_type.value, source[:60])

        image = CanonicalImage(media_type=media_type, data=data)
        return await asyncio.to_thread(
            normalize_image,
            image,
            self.config.max_dimension,
            self.config.canonical_format,
            self.config.jpeg_quality,
        )

    async def fetch_remote_bytes(self, url: str) -> tuple[bytes, str | None]:
        """Download raw bytes and the advertised content type (no normalization)."""
        return await self._fetch_remote(url)

    def _decode_inline(self, reference: InlineImage) -> bytes:
        if not reference.media_type.startswith("image/"):
            raise ImageAcquisitionError(
                f"Invalid data URL media type: {reference.media_type}. Expected image/*",
                ImageErrorKind.INVALID_REFERENCE,
            )
        try:
            data = base64.b64decode(reference.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageAcquisitionError(
                f"Invalid base64 payload in data URL: {e}",
                ImageErrorKind.INVALID_REFERENCE,
            ) from e
        if not data:
            raise ImageAcquisitionError("Inline image payload is empty", ImageErrorKind.EMPTY_PAYLOAD)
        return data

    def _resolve_local(self, path: str) -> Path:
        root = self.asset_root.resolve()
        candidate = (root / path.lstrip("/")).resolve()
        if not candidate.is_relative_to(root):
            raise ImageAcquisitionError(
                f"Image path escapes the asset root: {path}",
                ImageErrorKind.INVALID_REFERENCE,
            )
        return candidate

    async def _read_local(self, reference: LocalImage) -> bytes:
        path = self._resolve_local(reference.path)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ImageAcquisitionError(
                f"Could not read image file {reference.path}: {e.strerror or e}",
                ImageErrorKind.FILESYSTEM,
            ) from e
        if not data:
            raise ImageAcquisitionError(f"Image file is empty: {reference.path}", ImageErrorKind.EMPTY_PAYLOAD)
        return data

    async def _fetch_remote(self, url: str) -> tuple[bytes, str | None]:
        headers = {
            "Accept": "image/*",
            "User-Agent": self.config.user_agent,
        }

        try:
            fetch_url = apply_host_query_params(url, self.config.host_query_params)
            response = await self.client.get(
                fetch_url,
                headers=headers,
                timeout=self.config.fetch_timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise ImageAcquisitionError(
                f"Timed out fetching image after {self.config.fetch_timeout}s: {url[:80]}",
                ImageErrorKind.FETCH_FAILED,
            ) from e
        except httpx.HTTPError as e:
            raise ImageAcquisitionError(
                f"Failed to fetch image: {e.__class__.__name__}: {url[:80]}",
                ImageErrorKind.FETCH_FAILED,
            ) from e
        except (httpx.InvalidURL, ValueError) as e:
            raise ImageAcquisitionError(
                f"Malformed image URL {url[:80]}: {e}",
                ImageErrorKind.INVALID_REFERENCE,
            ) from e

        if not response.is_success:
            raise ImageAcquisitionError(
                f"Failed to fetch image: {response.status_code} {response.reason_phrase}",
                ImageErrorKind.FETCH_FAILED,
            )
        if not response.content:
            raise ImageAcquisitionError("Received empty image data", ImageErrorKind.EMPTY_PAYLOAD)

        return response.content, response.headers.get("content-type")

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
