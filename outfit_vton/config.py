"""Configuration management for the outfit try-on pipeline."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


def _default_host_params() -> dict[str, dict[str, str]]:
    return {
        # imgix-style CDN: force JPEG, cap width, fixed quality
        "images.unsplash.com": {"fm": "jpg", "q": "80", "w": "800"},
    }


class GeminiConfig(BaseModel):
    """Remote image-generation model settings."""
    model: str = "gemini-2.5-flash-image"
    timeout: float = 120.0  # seconds per generate_content call


class ImageConfig(BaseModel):
    """Image acquisition and normalization settings."""
    max_dimension: int = 1024
    canonical_format: Literal["PNG", "JPEG"] = "PNG"
    jpeg_quality: int = Field(default=90, ge=1, le=95)
    fetch_timeout: float = 30.0
    user_agent: str = "OutfitVTON/1.0"

    # Query params appended to URLs on known image hosts (never overriding existing ones)
    host_query_params: dict[str, dict[str, str]] = Field(default_factory=_default_host_params)


class PipelineConfig(BaseSettings):
    """Main pipeline configuration."""

    # Local image paths are resolved under this directory only
    asset_root: Path = Path("public")

    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)

    # Loaded from .env
    gemini_api_key: str | None = None
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"


def load_config() -> PipelineConfig:
    """Load configuration from environment and defaults."""
    return PipelineConfig()
