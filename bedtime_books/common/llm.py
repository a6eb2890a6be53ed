"""
LiteLLM-powered chat completion and image generation helper utilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, MutableMapping, Sequence

from litellm import completion, image_generation

ChatMessage = Mapping[str, Any]


@dataclass
class ChatResult:
    """
    Structured response returned from an LLM chat completion.
    """

    text: str
    raw: Any


@dataclass
class ImageResult:
    """
    First image returned by an image generation call.

    Exactly one of ``url`` or ``b64_json`` is normally populated, depending on the
    requested response format.
    """

    url: str | None
    b64_json: str | None
    raw: Any


CompletionCallable = Callable[..., ChatResult]
ImageGenerationCallable = Callable[..., ImageResult]


def call_chat_completion(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    api_key: str | None = None,
    **extra_kwargs: Any,
) -> ChatResult:
    """
    Invoke LiteLLM's `completion` API and return the consolidated text.
    """
    payload: MutableMapping[str, Any] = {
        "model": model,
        "messages": list(messages),
    }

    if temperature is not None:
        payload["temperature"] = temperature

    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    if api_key is not None:
        payload["api_key"] = api_key

    payload.update(extra_kwargs)

    response = completion(**payload)

    try:
        message = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RuntimeError("Unexpected LiteLLM response format.") from exc

    text = str(message or "").strip()
    return ChatResult(text=text, raw=response)


def call_image_generation(
    *,
    model: str,
    prompt: str,
    size: str | None = None,
    response_format: str | None = None,
    api_key: str | None = None,
    **extra_kwargs: Any,
) -> ImageResult:
    """
    Invoke LiteLLM's `image_generation` API and return the first image.
    """
    payload: MutableMapping[str, Any] = {
        "model": model,
        "prompt": prompt,
        "n": 1,
    }

    if size is not None:
        payload["size"] = size

    if response_format is not None:
        payload["response_format"] = response_format

    if api_key is not None:
        payload["api_key"] = api_key

    payload.update(extra_kwargs)

    response = image_generation(**payload)

    try:
        item = response.data[0]
    except (AttributeError, IndexError, TypeError) as exc:
        raise RuntimeError("Unexpected LiteLLM image response format.") from exc

    return ImageResult(
        url=getattr(item, "url", None),
        b64_json=getattr(item, "b64_json", None),
        raw=response,
    )
