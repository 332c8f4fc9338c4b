"""Gemini API client for multi-part virtual try-on generation."""

import asyncio
import logging
from typing import Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import GeminiConfig
from ..errors import RemoteCapabilityError, RemoteErrorKind


logger = logging.getLogger(__name__)


class ImageGenerator(Protocol):
    """Anything that can turn ordered content parts into a model response."""

    async def generate(self, parts: list[types.Part]) -> types.GenerateContentResponse: ...


class GeminiClient:
    """Client for the Gemini image-generation model."""

    def __init__(self, config: GeminiConfig, api_key: str | None):
        self.config = config
        self.api_key = api_key
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """Get or create the SDK client."""
        if not self.api_key:
            raise RemoteCapabilityError(
                "GEMINI_API_KEY is not set",
                RemoteErrorKind.NOT_CONFIGURED,
            )
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.config.timeout * 1000)),
            )
        return self._client

    async def check_connection(self) -> bool:
        """Verify the API key works and the configured model exists."""
        try:
            await self.client.aio.models.get(model=self.config.model)
            return True
        except (RemoteCapabilityError, genai_errors.APIError, httpx.HTTPError) as e:
            logger.warning("Gemini connection check failed: %s", e)
            return False

    async def generate(self, parts: list[types.Part]) -> types.GenerateContentResponse:
        """Send one ordered multi-part request.

        Raises:
            RemoteCapabilityError: ``network_failure`` on timeouts, transport
                errors and API error statuses; ``not_configured`` without a key.
        """
        client = self.client
        try:
            return await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.config.model,
                    contents=parts,
                    config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
                ),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RemoteCapabilityError(
                f"Image generation timed out after {self.config.timeout}s",
                RemoteErrorKind.NETWORK_FAILURE,
            ) from e
        except genai_errors.APIError as e:
            raise RemoteCapabilityError(
                f"Gemini API error {e.code}: {e.message or e.status}",
                RemoteErrorKind.NETWORK_FAILURE,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCapabilityError(
                f"Network error calling Gemini: {e.__class__.__name__}: {e}",
                RemoteErrorKind.NETWORK_FAILURE,
            ) from e
