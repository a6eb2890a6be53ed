"""
End-to-end orchestration for Bedtime Books story and image generation.
"""

from .pipeline import ProgressCallback, StorybookOrchestrator, StoryPackage

__all__ = [
    "ProgressCallback",
    "StorybookOrchestrator",
    "StoryPackage",
]
