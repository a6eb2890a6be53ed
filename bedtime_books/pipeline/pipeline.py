"""
Orchestrates the full Bedtime Books pipeline from the child's details to an illustrated story.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Mapping

import yaml

from bedtime_books.ai_generation import IllustrationGenerator
from bedtime_books.common.schema import Story, StoryRequest
from bedtime_books.pdf_generation import StorybookPDFBuilder
from bedtime_books.story_generation import StoryGenerator

ProgressCallback = Callable[[str, dict[str, Any]], None]


@dataclass
class StoryPackage:
    """Aggregated output of the Bedtime Books pipeline."""

    request: StoryRequest
    story: Story
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "request": self.request.model_dump(by_alias=True),
            "fallback": self.fallback,
            "story": self.story.to_payload(),
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StoryPackage":
        if "request" not in payload:
            raise ValueError("Story package payload must include 'request'.")
        if "story" not in payload:
            raise ValueError("Story package payload must include 'story'.")

        return cls(
            request=StoryRequest.model_validate(payload["request"]),
            story=Story.model_validate(payload["story"]),
            fallback=bool(payload.get("fallback", False)),
        )

    @classmethod
    def from_yaml(cls, source: str | Path) -> "StoryPackage":
        path = Path(source)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("Story package YAML must deserialize to a mapping.")
        return cls.from_dict(data)


class StorybookOrchestrator:
    """
    High-level coordinator that chains together story and illustration generation.
    """

    def __init__(
        self,
        *,
        story_generator: StoryGenerator | None = None,
        illustration_generator: IllustrationGenerator | None = None,
        pdf_builder: StorybookPDFBuilder | None = None,
    ) -> None:
        self._story_generator = story_generator or StoryGenerator()
        self._illustration_generator = illustration_generator or IllustrationGenerator()
        self._pdf_builder = pdf_builder or StorybookPDFBuilder()

    def run(
        self,
        request: StoryRequest,
        *,
        ai_model: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> StoryPackage:
        """
        Generate the story, illustrate every page and return the combined package.
        """
        self._notify(progress_callback, "story:generating", child_name=request.child_name)
        result = self._story_generator.generate_with_fallback(request)
        story = result.story
        self._notify(
            progress_callback,
            "story:generated",
            title=story.title,
            total_pages=len(story.pages),
            fallback=result.fallback,
        )

        self._notify(progress_callback, "images:generating", total_pages=len(story.pages))

        def on_page_done(page_number: int, total_pages: int) -> None:
            self._notify(
                progress_callback,
                "image:done",
                page_number=page_number,
                total_pages=total_pages,
            )

        images = self._illustration_generator.generate_images(
            story,
            illustration_style=request.illustration_style,
            child_name=request.child_name,
            model=ai_model,
            progress_callback=on_page_done,
        )

        package = StoryPackage(
            request=request,
            story=story.with_images(images),
            fallback=result.fallback,
        )
        self._notify(
            progress_callback,
            "pipeline:complete",
            title=story.title,
            total_pages=len(story.pages),
        )
        return package

    def render_pdf(self, package: StoryPackage, output: Path | str | BinaryIO) -> None:
        self._pdf_builder.build(package.story, output)

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is not None:
            callback(stage, payload)
