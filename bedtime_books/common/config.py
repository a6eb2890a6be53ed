"""
Environment-driven settings for Bedtime Books.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def _env_optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    replicate_api_token: str | None = None

    story_model: str = "gpt-4o-mini"
    story_temperature: float = 0.8

    # "openai-dalle3" or "google-nano-banana"
    image_model: str = "openai-dalle3"
    nano_banana_model: str = "google/nano-banana"

    mock_ai: bool = False
    mock_ai_fallback: bool = True
    mock_images: bool = False

    pdf_image_timeout: float | None = None

    log_level: str = "INFO"
    log_dir: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (after loading ``.env``)."""
        load_dotenv()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            replicate_api_token=os.getenv("REPLICATE_API_TOKEN") or None,
            story_model=os.getenv("BEDTIME_STORY_MODEL") or cls.story_model,
            story_temperature=float(
                os.getenv("BEDTIME_STORY_TEMPERATURE") or cls.story_temperature
            ),
            image_model=os.getenv("IMAGE_MODEL") or cls.image_model,
            nano_banana_model=os.getenv("NANO_BANANA_MODEL") or cls.nano_banana_model,
            mock_ai=_env_flag("MOCK_AI"),
            mock_ai_fallback=_env_flag("MOCK_AI_FALLBACK", default=True),
            mock_images=_env_flag("MOCK_IMAGES"),
            pdf_image_timeout=_env_optional_float("PDF_IMAGE_TIMEOUT"),
            log_level=(os.getenv("LOG_LEVEL") or cls.log_level).upper(),
            log_dir=os.getenv("LOG_DIR") or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
