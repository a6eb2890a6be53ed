"""
FastAPI application factory for the Bedtime Books API.
"""

from fastapi import FastAPI

from bedtime_books.ai_generation import IllustrationGenerator
from bedtime_books.common.config import Settings, get_settings
from bedtime_books.common.logger import setup_logging
from bedtime_books.pdf_generation import StorybookPDFBuilder
from bedtime_books.story_generation import StoryGenerator

from . import routes

PROJECT_NAME = "Bedtime Books API"
VERSION = "1.0.0"


def create_app(
    settings: Settings | None = None,
    *,
    story_generator: StoryGenerator | None = None,
    illustration_generator: IllustrationGenerator | None = None,
    pdf_builder: StorybookPDFBuilder | None = None,
) -> FastAPI:
    """
    Build the API with one long-lived instance of each collaborator.

    Collaborators not passed in are built from ``settings``.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(title=PROJECT_NAME, version=VERSION)
    app.state.settings = settings
    app.state.story_generator = story_generator or StoryGenerator(
        api_key=settings.openai_api_key,
        model=settings.story_model,
        temperature=settings.story_temperature,
        mock=settings.mock_ai,
        fallback_enabled=settings.mock_ai_fallback,
    )
    app.state.illustration_generator = illustration_generator or IllustrationGenerator(
        openai_api_key=settings.openai_api_key,
        replicate_api_token=settings.replicate_api_token,
        default_model=settings.image_model,
        nano_banana_model=settings.nano_banana_model,
        mock=settings.mock_images,
    )
    app.state.pdf_builder = pdf_builder or StorybookPDFBuilder(
        request_timeout=settings.pdf_image_timeout,
        allow_local_files=False,
    )

    app.include_router(routes.router)
    return app
