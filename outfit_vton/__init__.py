"""Outfit VTON: sequential virtual try-on over a generative image model."""

from .config import PipelineConfig, load_config
from .pipeline import TryOnPipeline

__all__ = ["PipelineConfig", "load_config", "TryOnPipeline"]
