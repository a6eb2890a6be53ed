"""
CLI example to run the complete Bedtime Books pipeline end-to-end.

Usage:
    python scripts/run_full_pipeline.py \
        --child-name "Ana" --age 5 --pronouns she/her \
        --minutes 5 --topic "kindness" \
        --output-yaml ana_story.yaml --output-pdf ana_story.pdf

Set MOCK_AI=true and MOCK_IMAGES=true to run without any vendor calls.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bedtime_books import (  # noqa: E402
    IllustrationGenerator,
    StoryGenerator,
    StorybookOrchestrator,
    StorybookPDFBuilder,
    StoryRequest,
)
from bedtime_books.ai_generation import SUPPORTED_MODELS  # noqa: E402
from bedtime_books.common import get_settings, setup_logging  # noqa: E402


class ProgressTracker:
    """
    Provides user-friendly command-line progress updates for the Bedtime Books pipeline.
    """

    def __init__(self) -> None:
        self._page_bar: tqdm | None = None

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        match stage:
            case "story:generating":
                name = payload.get("child_name", "the child")
                self._write(f"[1/3] Writing a bedtime story for {name}...")
            case "story:generated":
                title = payload.get("title", "")
                suffix = " (fallback story)" if payload.get("fallback") else ""
                self._write(f"[1/3] Story ready: {title}{suffix}.")
            case "images:generating":
                total = payload.get("total_pages", 0)
                self._write(f"[2/3] Illustrating {total} pages...")
                self._page_bar = tqdm(total=total, desc="Illustrated pages", unit="page")
            case "image:done":
                if self._page_bar is not None:
                    self._page_bar.update(1)
            case "pipeline:complete":
                self.close()
                self._write("[3/3] Pipeline complete.")

    def close(self) -> None:
        if self._page_bar is not None:
            self._page_bar.close()
            self._page_bar = None

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the full Bedtime Books generation pipeline.")
    parser.add_argument("--child-name", required=True, help="Name of the child starring in the story.")
    parser.add_argument("--age", type=int, required=True, help="Child's age (3-10).")
    parser.add_argument(
        "--pronouns",
        required=True,
        choices=["she/her", "he/him", "they/them"],
        help="Pronouns used for the child.",
    )
    parser.add_argument("--minutes", type=int, default=5, help="Target reading time in minutes (3-12).")
    parser.add_argument("--topic", required=True, help="Theme, moral, or subject chosen by the parent.")
    parser.add_argument(
        "--style",
        default="warm watercolor",
        help="Illustration style (default: warm watercolor).",
    )
    parser.add_argument(
        "--ai-model",
        choices=SUPPORTED_MODELS,
        default=None,
        help="Image backend to use (default: IMAGE_MODEL or openai-dalle3).",
    )
    parser.add_argument(
        "--output-yaml",
        default="bedtime_story.yaml",
        help="Output YAML file storing the request and illustrated story.",
    )
    parser.add_argument(
        "--output-pdf",
        default=None,
        help="Optional PDF path; when given, the illustrated story is rendered too.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    request = StoryRequest(
        child_name=args.child_name,
        age=args.age,
        pronouns=args.pronouns,
        minutes=args.minutes,
        topic=args.topic,
        illustration_style=args.style,
    )

    orchestrator = StorybookOrchestrator(
        story_generator=StoryGenerator(
            api_key=settings.openai_api_key,
            model=settings.story_model,
            temperature=settings.story_temperature,
            mock=settings.mock_ai,
            fallback_enabled=settings.mock_ai_fallback,
        ),
        illustration_generator=IllustrationGenerator(
            openai_api_key=settings.openai_api_key,
            replicate_api_token=settings.replicate_api_token,
            default_model=settings.image_model,
            nano_banana_model=settings.nano_banana_model,
            mock=settings.mock_images,
        ),
        pdf_builder=StorybookPDFBuilder(request_timeout=settings.pdf_image_timeout),
    )
    tracker = ProgressTracker()

    try:
        package = orchestrator.run(
            request,
            ai_model=args.ai_model,
            progress_callback=tracker,
        )
    finally:
        tracker.close()

    output_path = Path(args.output_yaml)
    output_path.write_text(package.to_yaml(), encoding="utf-8")
    print(f"Saved story package to {output_path}")

    if args.output_pdf:
        orchestrator.render_pdf(package, args.output_pdf)
        print(f"Rendered storybook PDF to {args.output_pdf}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
