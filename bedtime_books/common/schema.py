"""
Pydantic models describing stories and the request/response payloads around them.
"""

from __future__ import annotations

from typing import Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field

Pronouns = Literal["she/her", "he/him", "they/them"]
ImageModelName = Literal["openai-dalle3", "google-nano-banana"]

MIN_PAGES = 8
MAX_PAGES = 12


class Page(BaseModel):
    """One narrative unit plus the reference to its illustration."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(min_length=1, max_length=220)
    image_prompt: str = Field(min_length=5, max_length=400)
    image_url: str | None = Field(default=None, alias="imageUrl")


class Story(BaseModel):
    """Generated bedtime story: a title plus 8-12 ordered pages."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(min_length=2, max_length=80)
    pages: list[Page] = Field(min_length=MIN_PAGES, max_length=MAX_PAGES)

    def with_images(self, images: Sequence[str | None]) -> "Story":
        """
        Return a copy of the story with ``image_url`` attached to each page, in order.
        """
        if len(images) != len(self.pages):
            raise ValueError(
                f"Expected {len(self.pages)} image references, received {len(images)}."
            )
        pages = [
            page.model_copy(update={"image_url": image})
            for page, image in zip(self.pages, images)
        ]
        return self.model_copy(update={"pages": pages})

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class StoryRequest(BaseModel):
    """Child details collected by the story form."""

    model_config = ConfigDict(populate_by_name=True)

    child_name: str = Field(min_length=1, alias="childName")
    age: int = Field(ge=3, le=10)
    pronouns: Pronouns
    minutes: int = Field(ge=3, le=12)
    topic: str = Field(min_length=2)
    illustration_style: str = Field(default="warm watercolor", alias="illustrationStyle")


class ImagesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    story: Story
    illustration_style: str = Field(min_length=2, alias="illustrationStyle")
    child_name: str | None = Field(default=None, min_length=1, alias="childName")
    ai_model: ImageModelName | None = Field(default=None, alias="aiModel")


class ImagesResponse(BaseModel):
    # data URIs or URLs, ordered by page index
    images: list[str]
