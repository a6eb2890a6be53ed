"""
FastAPI dependencies handing the long-lived collaborators to route handlers.
"""

from fastapi import Request

from bedtime_books.ai_generation import IllustrationGenerator
from bedtime_books.pdf_generation import StorybookPDFBuilder
from bedtime_books.story_generation import StoryGenerator


def get_story_generator(request: Request) -> StoryGenerator:
    return request.app.state.story_generator


def get_illustration_generator(request: Request) -> IllustrationGenerator:
    return request.app.state.illustration_generator


def get_pdf_builder(request: Request) -> StorybookPDFBuilder:
    return request.app.state.pdf_builder
