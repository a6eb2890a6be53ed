"""
Prompt construction utilities for Bedtime Books illustration generation.
"""

from __future__ import annotations

SCENE_GUARD = (
    "no sleeping children in beds unless specifically mentioned in the story text, "
    "focus on the main character's actions and emotions"
)


def build_illustration_prompt(
    scene_prompt: str,
    *,
    illustration_style: str,
    character_name: str,
    page_number: int,
) -> str:
    """
    Build the prompt for one page so every illustration shares style and character.

    Parameters
    ----------
    scene_prompt:
        The page's ``image_prompt``. Falls back to a generic scene label when blank.
    illustration_style:
        Style chosen on the form (e.g. "warm watercolor").
    character_name:
        Child's name, or the story title when no name was supplied.
    page_number:
        1-based page number, used only for the generic fallback scene.
    """
    if not illustration_style or not illustration_style.strip():
        raise ValueError("illustration_style must be a non-empty string.")

    scene = scene_prompt.strip() if scene_prompt and scene_prompt.strip() else (
        f"page {page_number} of the story"
    )

    character_description = (
        f"main character {character_name}, a young child with consistent appearance: "
        "same hair style and color, same facial features, same clothing style, same age and "
        "build throughout the story. The character should be the same person in every image."
    )

    art_style_description = (
        f"{illustration_style.strip()} children's picture book illustration style, warm and cozy "
        "bedtime atmosphere, soft lighting, gentle colors, child-friendly, safe and appropriate "
        "for young children"
    )

    return f"{art_style_description}, {character_description}, scene: {scene}, {SCENE_GUARD}"
