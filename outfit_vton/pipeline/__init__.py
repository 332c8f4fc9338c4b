"""Try-on pipeline: request building, response interpretation, layering."""

from .outfit_pipeline import LayeringState, TryOnPipeline, layer_garments, should_tolerate_failure
from .request_builder import apply_retry_directive, build_generation_parts, build_instruction
from .response_interpreter import ResponseInterpreter

__all__ = [
    "LayeringState",
    "TryOnPipeline",
    "layer_garments",
    "should_tolerate_failure",
    "apply_retry_directive",
    "build_generation_parts",
    "build_instruction",
    "ResponseInterpreter",
]
