"""
HTTP endpoints: story generation, page illustration and PDF export.

Handlers are plain ``def`` functions so FastAPI runs the blocking vendor calls and PDF
rendering in its threadpool.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from bedtime_books.ai_generation import IllustrationGenerator
from bedtime_books.common.schema import ImagesRequest, ImagesResponse, Story, StoryRequest
from bedtime_books.pdf_generation import StorybookPDFBuilder, story_pdf_filename
from bedtime_books.story_generation import StoryGenerationError, StoryGenerator

from .dependencies import get_illustration_generator, get_pdf_builder, get_story_generator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(request: Request):
    settings = request.app.state.settings
    return {
        "status": "ok",
        "mock_ai": settings.mock_ai,
        "mock_images": settings.mock_images,
    }


@router.post("/api/generate/story")
def generate_story(
    payload: StoryRequest,
    generator: StoryGenerator = Depends(get_story_generator),
):
    try:
        result = generator.generate_with_fallback(payload)
    except StoryGenerationError as exc:
        logger.error("Story generation failed with fallback disabled: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    headers = {"x-fallback": "true"} if result.fallback else None
    return JSONResponse(result.story.to_payload(), headers=headers)


@router.post("/api/generate/images")
def generate_images(
    payload: ImagesRequest,
    generator: IllustrationGenerator = Depends(get_illustration_generator),
):
    try:
        images = generator.generate_images(
            payload.story,
            illustration_style=payload.illustration_style,
            child_name=payload.child_name,
            model=payload.ai_model,
        )
    except Exception:
        logger.exception("Image generation error")
        return JSONResponse({"error": "Failed to generate images"}, status_code=500)

    return ImagesResponse(images=images)


@router.post("/api/export/pdf")
def export_pdf(
    story: Story,
    builder: StorybookPDFBuilder = Depends(get_pdf_builder),
):
    try:
        content = builder.render(story)
    except Exception:
        logger.exception("PDF export failed for '%s'", story.title)
        return JSONResponse({"error": "Failed to export PDF"}, status_code=500)

    filename = story_pdf_filename(story.title)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )
