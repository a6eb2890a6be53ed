"""
Story generation utilities for crafting personalized bedtime stories.
"""

from .prompting import StoryPrompt, build_story_prompt
from .story_service import StoryGenerationError, StoryGenerator, StoryResult
from .templates import build_fallback_story, build_mock_story

__all__ = [
    "StoryPrompt",
    "build_story_prompt",
    "StoryGenerator",
    "StoryGenerationError",
    "StoryResult",
    "build_fallback_story",
    "build_mock_story",
]
