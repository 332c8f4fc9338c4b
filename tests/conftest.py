# Test fixtures and configuration
import base64
import io
import sys
from pathlib import Path

import httpx
import pytest
from google.genai import types
from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from outfit_vton.config import ImageConfig, PipelineConfig
from outfit_vton.services.image_loader import ImageLoader


def make_image_bytes(size=(4, 4), fmt="PNG", mode="RGB", color=(200, 30, 30)) -> bytes:
    """Encode a solid-color test image."""
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 128)
    img = Image.new(mode, size, color)
    output = io.BytesIO()
    img.save(output, format=fmt)
    return output.getvalue()


def data_url(data: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode()}"


def image_response(data: bytes, mime_type: str = "image/png", caption: str | None = None):
    """Model response carrying an inline image (optionally after a caption)."""
    parts = []
    if caption:
        parts.append(types.Part.from_text(text=caption))
    parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def text_response(*texts: str):
    """Model response with text only (caption or refusal)."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part.from_text(text=t) for t in texts],
                )
            )
        ]
    )


def file_response(uri: str, mime_type: str = "image/png"):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(file_data=types.FileData(file_uri=uri, mime_type=mime_type))],
                )
            )
        ]
    )


class FakeGenerator:
    """Scripted stand-in for the Gemini client; records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[list[types.Part]] = []

    async def generate(self, parts):
        self.calls.append(parts)
        if not self.responses:
            raise AssertionError("FakeGenerator ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def check_connection(self):
        return True


@pytest.fixture
def png_bytes():
    """Small opaque PNG, already canonical."""
    return make_image_bytes()


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes(fmt="JPEG")


@pytest.fixture
def asset_root(tmp_path, png_bytes):
    """Asset directory containing one product image."""
    root = tmp_path / "public"
    (root / "products").mkdir(parents=True)
    (root / "products" / "dress.png").write_bytes(png_bytes)
    return root


@pytest.fixture
def image_config():
    return ImageConfig()


def make_loader(asset_root: Path, handler=None, config: ImageConfig | None = None) -> ImageLoader:
    """ImageLoader whose network calls go to ``handler`` (httpx MockTransport)."""
    client = None
    if handler is not None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageLoader(config=config or ImageConfig(), asset_root=asset_root, client=client)


@pytest.fixture
def pipeline_config(asset_root):
    return PipelineConfig(asset_root=asset_root, gemini_api_key="test-key")
