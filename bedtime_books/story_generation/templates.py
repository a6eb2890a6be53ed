"""
Deterministic stories used in mock mode and when the LLM call fails.
"""

from __future__ import annotations

from typing import Callable

from bedtime_books.common.schema import Page, Story, StoryRequest

_MOCK_BEATS: tuple[Callable[[str, str], str], ...] = (
    lambda n, t: f"{n} hears a gentle idea about {t} and feels curious.",
    lambda n, t: f"{n} meets a kind helper who shares a story about {t}.",
    lambda n, t: f"{n} tries a small act related to {t} and smiles at the result.",
    lambda n, t: f"{n} learns a friendly lesson about patience and {t}.",
    lambda n, t: f"{n} notices how {t} can make friends feel safe and happy.",
    lambda n, t: f"{n} practices {t} again, a little braver this time.",
    lambda n, t: f"{n} teaches someone else a tiny tip about {t}.",
    lambda n, t: f"{n} discovers that mistakes with {t} are okay and help us grow.",
    lambda n, t: f"{n} uses {t} to solve a gentle problem before bedtime.",
    lambda n, t: f"Tucked in and cozy, {n} dreams of tomorrow and more {t}.",
)

FALLBACK_TITLE = "A Cozy Night of Kindness"
TEMPLATE_PAGE_COUNT = 10


def build_mock_story(request: StoryRequest) -> Story:
    """
    Templated ten-page story built from the child's name and topic.
    """
    pages = [
        Page(
            text=_MOCK_BEATS[index % len(_MOCK_BEATS)](request.child_name, request.topic),
            image_prompt=(
                f"{request.illustration_style} -- soft cozy colors, "
                f"bedtime picture book style, scene {index + 1}"
            ),
        )
        for index in range(TEMPLATE_PAGE_COUNT)
    ]
    return Story(title=f"{request.child_name}'s {request.topic} Adventure", pages=pages)


def build_fallback_story() -> Story:
    pages = [
        Page(
            text=(
                f"On page {index + 1}, our hero discovers small ways to be kind and brave, "
                "drifting toward sweet dreams."
            ),
            image_prompt=f"soft watercolor, bedtime scene, stars and moon, page {index + 1}",
        )
        for index in range(TEMPLATE_PAGE_COUNT)
    ]
    return Story(title=FALLBACK_TITLE, pages=pages)
