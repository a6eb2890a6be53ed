"""
AI image generation package for Bedtime Books.
"""

from .illustration_service import (
    GOOGLE_NANO_BANANA,
    OPENAI_DALLE3,
    SUPPORTED_MODELS,
    IllustrationGenerator,
    ImageGenerationError,
    normalize_image_outputs,
)
from .placeholders import failed_image, mock_image
from .prompting import build_illustration_prompt

__all__ = [
    "GOOGLE_NANO_BANANA",
    "OPENAI_DALLE3",
    "SUPPORTED_MODELS",
    "IllustrationGenerator",
    "ImageGenerationError",
    "build_illustration_prompt",
    "failed_image",
    "mock_image",
    "normalize_image_outputs",
]
