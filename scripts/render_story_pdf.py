"""
Render a Bedtime Books story (JSON, YAML, or a saved story package) into a printable PDF.

Usage:
    python scripts/render_story_pdf.py \
        --story story.json \
        --output bedtime_story.pdf
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping

import yaml

# Ensure project root is on the Python path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bedtime_books import Story, StorybookPDFBuilder, story_pdf_filename  # noqa: E402
from bedtime_books.common import get_settings, setup_logging  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a Bedtime Books story file into a storybook PDF."
    )
    parser.add_argument(
        "--story",
        required=True,
        help="Path to a story JSON/YAML file, or a story package YAML from run_full_pipeline.py.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Destination PDF file path (default: sanitized story title in the current directory).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for downloading remote illustrations (default: none).",
    )
    parser.add_argument(
        "--invariant",
        action="store_true",
        help="Produce reproducible output (fixed timestamps and document IDs).",
    )
    return parser.parse_args()


def load_story(path: Path) -> Story:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data: Any = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError("Unsupported story file format. Use YAML or JSON.")

    if not isinstance(data, Mapping):
        raise ValueError("Story file must deserialize to a mapping.")

    # Story packages wrap the story next to the request
    if "story" in data and "pages" not in data:
        data = data["story"]
    return Story.model_validate(data)


def main() -> int:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    story = load_story(Path(args.story))
    output = args.output or story_pdf_filename(story.title)

    builder = StorybookPDFBuilder(
        request_timeout=args.timeout if args.timeout is not None else settings.pdf_image_timeout,
        invariant=args.invariant,
    )
    builder.build(story, output)

    print(f"Rendered storybook PDF to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
