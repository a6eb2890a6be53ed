"""
Page illustration generation backed by OpenAI DALL-E 3 (via LiteLLM) or Google Nano Banana
(via Replicate).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable as IterableABC
from typing import Any, Callable

import replicate

from bedtime_books.common import (
    ImageGenerationCallable,
    ImageResult,
    call_image_generation,
)
from bedtime_books.common.schema import Story

from .placeholders import failed_image, mock_image
from .prompting import build_illustration_prompt

logger = logging.getLogger(__name__)

OPENAI_DALLE3 = "openai-dalle3"
GOOGLE_NANO_BANANA = "google-nano-banana"
SUPPORTED_MODELS = (OPENAI_DALLE3, GOOGLE_NANO_BANANA)

DALLE3_MODEL = "dall-e-3"
DALLE3_SIZE = "1024x1024"
DEFAULT_NANO_BANANA_MODEL = "google/nano-banana"

PageProgressCallback = Callable[[int, int], None]


class ImageGenerationError(RuntimeError):
    """Raised when an image backend returns nothing usable."""


class IllustrationGenerator:
    """
    Generate one illustration reference per story page.

    Parameters
    ----------
    openai_api_key:
        OpenAI key forwarded to LiteLLM. Falls back to ``OPENAI_API_KEY``.
    replicate_api_token:
        Replicate token for the Nano Banana backend. Falls back to ``REPLICATE_API_TOKEN``.
    default_model:
        Backend used when a request does not name one. Falls back to ``IMAGE_MODEL``.
    nano_banana_model:
        Replicate model identifier for the Nano Banana backend.
    mock:
        Return deterministic SVG art instead of calling any backend.
    image_fn:
        Optional LiteLLM image function replacement. Mainly useful for testing.
    replicate_client:
        Optional pre-configured :class:`replicate.Client`. Mainly useful for testing.
    """

    def __init__(
        self,
        *,
        openai_api_key: str | None = None,
        replicate_api_token: str | None = None,
        default_model: str | None = None,
        nano_banana_model: str = DEFAULT_NANO_BANANA_MODEL,
        mock: bool = False,
        image_fn: ImageGenerationCallable | None = None,
        replicate_client: replicate.Client | None = None,
    ) -> None:
        self._openai_api_key = openai_api_key or os.getenv("OPENAI_API_KEY")
        self._replicate_api_token = replicate_api_token or os.getenv("REPLICATE_API_TOKEN")
        self._default_model = default_model or os.getenv("IMAGE_MODEL") or OPENAI_DALLE3
        self._nano_banana_model = nano_banana_model
        self._mock = mock
        self._image_fn: ImageGenerationCallable = image_fn or call_image_generation
        self._replicate_client = replicate_client

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def mock(self) -> bool:
        return self._mock

    def generate_images(
        self,
        story: Story,
        *,
        illustration_style: str,
        child_name: str | None = None,
        model: str | None = None,
        progress_callback: PageProgressCallback | None = None,
    ) -> list[str]:
        """
        Return image references ordered by page index.

        A failure on any single page is logged and replaced by a placeholder image so the
        batch always yields one reference per page. An unsupported ``model`` raises
        :class:`ValueError` before anything is generated.
        """
        total = len(story.pages)

        if self._mock:
            logger.info("Mock mode enabled, returning %d mock illustrations", total)
            images = [mock_image(index) for index in range(total)]
            if progress_callback is not None:
                for index in range(total):
                    progress_callback(index + 1, total)
            return images

        selected_model = model or self._default_model
        if selected_model not in SUPPORTED_MODELS:
            raise ValueError(
                f"Image model '{selected_model}' is not supported. "
                f"Supported models: {', '.join(SUPPORTED_MODELS)}."
            )
        logger.info("Using image generation model: %s (requested: %s)", selected_model, model)

        character_name = child_name or story.title
        images: list[str] = []
        for index, page in enumerate(story.pages):
            prompt = build_illustration_prompt(
                page.image_prompt,
                illustration_style=illustration_style,
                character_name=character_name,
                page_number=index + 1,
            )
            try:
                if selected_model == GOOGLE_NANO_BANANA:
                    image = self._generate_with_nano_banana(prompt)
                else:
                    image = self._generate_with_dalle3(prompt)
            except Exception:
                logger.exception("Failed to generate image for page %d", index + 1)
                image = failed_image()
            images.append(image)
            if progress_callback is not None:
                progress_callback(index + 1, total)

        return images

    def _generate_with_dalle3(self, prompt: str) -> str:
        result: ImageResult = self._image_fn(
            model=DALLE3_MODEL,
            prompt=prompt,
            size=DALLE3_SIZE,
            response_format="url",
            api_key=self._openai_api_key,
        )
        if result.url:
            return result.url
        if result.b64_json:
            return _as_png_data_uri(result.b64_json)
        raise ImageGenerationError("No image URL returned")

    def _generate_with_nano_banana(self, prompt: str) -> str:
        output = self._get_replicate_client().run(
            self._nano_banana_model,
            input={
                "prompt": f"Generate a children's book illustration: {prompt}",
                "output_format": "png",
            },
        )
        outputs = normalize_image_outputs(output)
        if not outputs or not outputs[0]:
            raise ImageGenerationError("Invalid image data received from Nano Banana")
        return _as_png_data_uri(outputs[0])

    def _get_replicate_client(self) -> replicate.Client:
        if self._replicate_client is None:
            if not self._replicate_api_token:
                raise ValueError(
                    "Replicate API token is required. Set REPLICATE_API_TOKEN or pass replicate_api_token."
                )
            self._replicate_client = replicate.Client(api_token=self._replicate_api_token)
        return self._replicate_client


def _as_png_data_uri(value: str) -> str:
    # URLs and data URIs pass through; anything else is taken as bare base64
    if value.startswith(("data:", "http://", "https://")):
        return value
    return f"data:image/png;base64,{value}"


def normalize_image_outputs(raw: Any) -> list[str]:
    """
    Normalize the image outputs returned by Replicate into a list of URL strings.
    """

    if raw is None:
        return []

    if isinstance(raw, str):
        return [raw]

    if isinstance(raw, bytes):
        return [raw.decode("utf-8", errors="ignore")]

    # replicate.helpers.FileOutput
    url = getattr(raw, "url", None)
    if isinstance(url, str):
        return [url]

    if isinstance(raw, IterableABC):
        collected = list(raw)
        if not collected:
            return []

        if all(isinstance(item, str) and len(item) == 1 for item in collected):
            return ["".join(collected)]

        normalized: list[str] = []
        for item in collected:
            normalized.extend(normalize_image_outputs(item))
        return normalized

    return [str(raw)]
