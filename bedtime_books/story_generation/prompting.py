"""
Prompt construction utilities for the Bedtime Books story generation workflow.
"""

from __future__ import annotations

from dataclasses import dataclass

from bedtime_books.common.schema import StoryRequest

DEFAULT_PAGE_COUNT = 10

STORY_JSON_SHAPE = '{ "title": string, "pages": [{ "text": string, "image_prompt": string }] }'


@dataclass(frozen=True)
class StoryPrompt:
    """
    Container for the system and user prompts passed to the completion API.
    """

    system: str
    user: str


def build_story_prompt(
    request: StoryRequest,
    *,
    page_count: int = DEFAULT_PAGE_COUNT,
) -> StoryPrompt:
    """
    Build the prompt pair used to solicit a complete bedtime story as JSON.
    """
    system_prompt = f"""You are a children's author for ages {request.age}.
Constraints: positive, kid-safe, cozy bedtime tone.
Reading time ≈ {request.minutes} minutes, short sentences, simple vocabulary.
Return ONLY valid JSON per schema: {STORY_JSON_SHAPE}.
"""

    user_prompt = f"""Child: {request.child_name} ({request.pronouns}), Age {request.age}
Topic from parent (theme/moral/subject): {request.topic}.
Derive a positive, age-appropriate theme and gentle moral from this topic that encourages kindness, resilience, and curiosity.
Structure: Title + {page_count} pages. Each page 1–2 sentences.
Illustration style: {request.illustration_style}. Soothing palette.
Consistent recurring character using the child's name.
"""

    return StoryPrompt(system=system_prompt, user=user_prompt)
