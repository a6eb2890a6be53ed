"""
Service layer for producing bedtime stories via LiteLLM-compatible models.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from bedtime_books.common import ChatResult, CompletionCallable, call_chat_completion
from bedtime_books.common.schema import Story, StoryRequest

from .prompting import StoryPrompt, build_story_prompt
from .templates import build_fallback_story, build_mock_story

logger = logging.getLogger(__name__)

DEFAULT_STORY_MODEL = "gpt-4o-mini"


class StoryGenerationError(RuntimeError):
    """Raised when the upstream model fails to produce a valid story."""


@dataclass(frozen=True)
class StoryResult:
    story: Story
    fallback: bool = False


class StoryGenerator:
    """
    High-level helper that turns the child's details into a validated story.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float = 0.8,
        completion_fn: CompletionCallable | None = None,
        mock: bool = False,
        fallback_enabled: bool = True,
    ) -> None:
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._model = model or os.getenv("BEDTIME_STORY_MODEL") or DEFAULT_STORY_MODEL
        self._temperature = temperature
        self._completion_fn: CompletionCallable = completion_fn or call_chat_completion
        self._mock = mock
        self._fallback_enabled = fallback_enabled

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._model

    @property
    def mock(self) -> bool:
        return self._mock

    def generate_story(self, request: StoryRequest, **response_kwargs: Any) -> Story:
        """
        Produce a story for the request, or raise :class:`StoryGenerationError`.
        """
        if self._mock:
            logger.info("Mock mode enabled, returning templated story for %s", request.child_name)
            try:
                return build_mock_story(request)
            except ValidationError as exc:
                raise StoryGenerationError(f"Mock story failed validation: {exc}") from exc

        prompt: StoryPrompt = build_story_prompt(request)
        messages = [
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": prompt.user},
        ]

        try:
            result: ChatResult = self._completion_fn(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                api_key=self._api_key,
                response_format={"type": "json_object"},
                **response_kwargs,
            )
        except Exception as exc:
            raise StoryGenerationError(f"Story completion failed: {exc}") from exc

        return self._parse_story(result.text)

    def generate_with_fallback(self, request: StoryRequest) -> StoryResult:
        """
        Like :meth:`generate_story`, but substitute the templated fallback story on failure.
        """
        try:
            return StoryResult(story=self.generate_story(request))
        except StoryGenerationError as exc:
            if not self._fallback_enabled:
                raise
            logger.warning("Story generation failed, serving fallback story: %s", exc)
            return StoryResult(story=build_fallback_story(), fallback=True)

    @staticmethod
    def _parse_story(raw_text: str) -> Story:
        try:
            payload = json.loads(raw_text or "{}")
        except json.JSONDecodeError as exc:
            raise StoryGenerationError("Failed to parse story response as JSON.") from exc

        try:
            return Story.model_validate(payload)
        except ValidationError as exc:
            raise StoryGenerationError(f"Story response did not match the schema: {exc}") from exc
