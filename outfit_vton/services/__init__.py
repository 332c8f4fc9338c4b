"""Network and filesystem adapters."""

from .gemini_client import GeminiClient, ImageGenerator
from .image_loader import ImageLoader

__all__ = ["GeminiClient", "ImageGenerator", "ImageLoader"]
