"""FastAPI server for layered virtual try-on.

Receives requests from the chat frontend with:
- model_photo: data URL, asset path or http(s) URL of the user's photo
- garment_photo / items: the product image(s) to layer onto it
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from outfit_vton.config import PipelineConfig
from outfit_vton.logging_setup import configure_logging
from outfit_vton.models import GarmentItem, TryOnRequest, parse_image_reference
from outfit_vton.pipeline import TryOnPipeline


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Outfit VTON API",
    description="Sequential virtual try-on using Gemini image generation",
    version="1.0.0",
)

# Enable CORS for the chat frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SingleTryOnBody(BaseModel):
    """Request body for a single garment try-on."""
    model_photo: str
    garment_photo: str
    garment_name: str
    description: str | None = None


class OutfitBody(BaseModel):
    """Request body for layering several garments."""
    model_photo: str
    items: list[GarmentItem]


class TryOnResponse(BaseModel):
    """Response with generated image."""
    success: bool
    image_url: str | None = None
    error: str | None = None
    error_kind: str | None = None
    applied_items: list[str] | None = None
    skipped_item: str | None = None


# Initialize pipeline (will be done on first request)
_pipeline: TryOnPipeline | None = None


def get_pipeline() -> TryOnPipeline:
    """Get or create the pipeline instance."""
    global _pipeline
    if _pipeline is None:
        config = PipelineConfig()  # Loads from .env automatically via pydantic-settings
        configure_logging(config.log_level)
        _pipeline = TryOnPipeline(config)
    return _pipeline


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Outfit VTON API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    pipeline = get_pipeline()
    gemini_ok = await pipeline.generator.check_connection()

    return {
        "status": "ok" if gemini_ok else "degraded",
        "gemini": "connected" if gemini_ok else "disconnected",
    }


@app.post("/api/tryon", response_model=TryOnResponse)
async def generate_tryon(body: SingleTryOnBody):
    """Apply one garment to the user's photo."""
    try:
        pipeline = get_pipeline()
        request = TryOnRequest(
            base_photo=parse_image_reference(body.model_photo),
            garment_image=parse_image_reference(body.garment_photo),
            garment_name=body.garment_name,
            garment_description=body.description,
        )
        result = await pipeline.generate_single_tryon(request)

    except Exception as e:
        logger.exception("Single try-on request failed")
        return TryOnResponse(success=False, error=str(e))

    if result.status == "failure":
        return TryOnResponse(success=False, error=result.reason, error_kind=result.error_kind)
    return TryOnResponse(success=True, image_url=result.encoded_image)


@app.post("/api/outfit", response_model=TryOnResponse)
async def generate_outfit(body: OutfitBody):
    """Layer every item onto the user's photo, keeping partial results."""
    try:
        pipeline = get_pipeline()
        result = await pipeline.generate_layered_outfit(body.model_photo, body.items)

    except Exception as e:
        logger.exception("Outfit request failed")
        return TryOnResponse(success=False, error=str(e))

    if result.status == "failure":
        return TryOnResponse(success=False, error=result.reason, error_kind=result.cause.error_kind)
    return TryOnResponse(
        success=True,
        image_url=result.image_url,
        applied_items=result.applied_items,
        skipped_item=result.skipped_item,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
