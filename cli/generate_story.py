#!/usr/bin/env python3
"""
CLI for generating personalized bedtime stories.

Usage:
    python cli/generate_story.py Ava 5 girl
    python cli/generate_story.py Ava 5 girl --photo ava.jpg
    python cli/generate_story.py Leo 7 boy --pages 3 --no-images --stdout
"""

import argparse
import asyncio
import logging
import mimetypes
import re
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bedtime_stories.api.logging import configure_logging
from bedtime_stories.config import STORY_CONSTANTS, load_pipeline_config
from bedtime_stories.core.errors import StoryGenerationError
from bedtime_stories.core.gateways import ImageGenerationGateway, TextCompletionGateway
from bedtime_stories.core.programs import StoryPipeline


def _print_progress(stage: str, detail: str, completed: int, total: int) -> None:
    suffix = f" ({completed}/{total})" if total else ""
    print(f"[{stage}] {detail}{suffix}", file=sys.stderr)


async def run(args) -> int:
    base = load_pipeline_config()
    config = replace(
        base,
        photo_driven=args.photo is not None,
        page_count=args.pages,
        model=args.model or base.model,
        illustrate=not args.no_images,
        strict_attributes=args.strict or base.strict_attributes,
    )

    photo = mime_type = None
    if args.photo:
        photo_path = Path(args.photo)
        photo = photo_path.read_bytes()
        mime_type = mimetypes.guess_type(photo_path.name)[0] or "image/jpeg"

    image_gateway = ImageGenerationGateway(
        poll_interval=config.poll_interval,
        max_poll_attempts=config.max_poll_attempts,
    )
    pipeline = StoryPipeline(TextCompletionGateway(model=config.model), image_gateway, config)

    try:
        request = pipeline.prepare_request(args.name, args.age, args.gender, photo, mime_type)
        story = await pipeline.run(
            request,
            on_progress=_print_progress if args.verbose else None,
        )
    except StoryGenerationError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        if e.detail and args.verbose:
            print(f"  {e.detail}", file=sys.stderr)
        return 1
    finally:
        await image_gateway.aclose()

    formatted = story.to_formatted_string()

    if args.stdout:
        print(formatted)
    else:
        output_dir = Path(__file__).parent.parent / "output"
        output_dir.mkdir(exist_ok=True)

        if args.output:
            filename = args.output if args.output.endswith(".md") else f"{args.output}.md"
        else:
            # Auto-generate filename from name and timestamp
            slug = re.sub(r"[^a-z0-9]+", "_", args.name.lower())[:30].strip("_") or "story"
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{slug}_{timestamp}.md"

        output_path = output_dir / filename
        output_path.write_text(formatted)
        print(f"Story saved to: {output_path}")

    if args.verbose:
        print("\n--- Generation Summary ---", file=sys.stderr)
        print(f"Title: {story.title}", file=sys.stderr)
        print(f"Pages: {story.page_count}", file=sys.stderr)
        statuses = [page.image_status.value for page in story.pages]
        print(f"Images: {statuses}", file=sys.stderr)

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Generate a short illustrated bedtime story for a child",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python cli/generate_story.py Ava 5 girl
    python cli/generate_story.py Ava 5 girl --photo ava.jpg --pages 4
    python cli/generate_story.py Leo 7 boy --no-images --stdout
        """,
    )

    parser.add_argument("name", type=str, help="The child's name")
    parser.add_argument("age", type=str, help="The child's age in years")
    parser.add_argument(
        "gender",
        type=str,
        nargs="?",
        default=None,
        help="How the story should refer to the child (required with --photo, defaults to \"child\")",
    )

    parser.add_argument(
        "--photo",
        type=str,
        default=None,
        help="Photo of the child; the illustrations will be based on it",
    )

    parser.add_argument(
        "--pages",
        type=int,
        default=STORY_CONSTANTS["page_count"],
        help=f"Number of story pages (default: {STORY_CONSTANTS['page_count']})",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Text model id (default: chosen from available API keys)",
    )

    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip illustration generation",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject photos whose description misses hairstyle, hair color or skin tone",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file name (saved to output/ directory). Auto-generated if not specified.",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print to terminal instead of saving to file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress information",
    )

    args = parser.parse_args()

    configure_logging(json_format=False, level=logging.INFO if args.verbose else logging.WARNING)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
