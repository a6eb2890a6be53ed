"""
Bedtime Books package exposing story generation, illustration, pipeline, and PDF tooling.
"""

from .ai_generation import IllustrationGenerator
from .common import Page, Story, StoryRequest
from .pdf_generation import StorybookPDFBuilder, story_pdf_filename
from .pipeline import StorybookOrchestrator, StoryPackage
from .story_generation import StoryGenerator

__all__ = [
    "IllustrationGenerator",
    "Page",
    "Story",
    "StoryGenerator",
    "StoryPackage",
    "StoryRequest",
    "StorybookOrchestrator",
    "StorybookPDFBuilder",
    "story_pdf_filename",
]
