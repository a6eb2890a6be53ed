"""
Common utilities shared across Bedtime Books modules.
"""

from .config import Settings, get_settings
from .llm import (
    ChatResult,
    CompletionCallable,
    ImageGenerationCallable,
    ImageResult,
    call_chat_completion,
    call_image_generation,
)
from .logger import setup_logging
from .schema import (
    ImagesRequest,
    ImagesResponse,
    Page,
    Story,
    StoryRequest,
)

__all__ = [
    "ChatResult",
    "CompletionCallable",
    "ImageGenerationCallable",
    "ImageResult",
    "ImagesRequest",
    "ImagesResponse",
    "Page",
    "Settings",
    "Story",
    "StoryRequest",
    "call_chat_completion",
    "call_image_generation",
    "get_settings",
    "setup_logging",
]
