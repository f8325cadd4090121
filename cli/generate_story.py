#!/usr/bin/env python3
"""
CLI for generating illustrated, narrated stories.

Usage:
    python cli/generate_story.py "a shy dragon learns to make friends" --mock --verbose
    python cli/generate_story.py "a bear who can't sleep" --length medium --topic "Sleepy Bear" --token $ID_TOKEN
    python cli/generate_story.py "bir uykusuz ayı" --language tr --stdout
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storybox.config.functions import (  # noqa: E402
    MEDIA_DIR,
    get_audio_store,
    get_blob_uploader,
    get_generation_client,
)
from storybox.core.programs.story_pipeline import StoryPipeline  # noqa: E402
from storybox.core.types import Principal, StoryGenerationParams, StoryLength  # noqa: E402
from storybox.integrations.local_storage import LocalAudioStore, LocalBlobStore  # noqa: E402
from storybox.integrations.mock_functions import MockGenerationClient  # noqa: E402
from storybox.logging import configure_logging  # noqa: E402


def main():
    parser = argparse.ArgumentParser(
        description="Generate an illustrated, narrated bedtime story",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python cli/generate_story.py "a shy dragon learns to make friends" --mock
    python cli/generate_story.py "a bear who can't sleep" --length long --character "a small brown bear"
    python cli/generate_story.py "space adventure" --output space.json --verbose
        """,
    )

    parser.add_argument("prompt", type=str, help="What the story should be about")
    parser.add_argument(
        "--length",
        type=str,
        choices=[length.value for length in StoryLength],
        default=StoryLength.SHORT.value,
        help="Story length (default: short)",
    )
    parser.add_argument("--character", type=str, default="", help="Main character description")
    parser.add_argument("--location", type=str, default="", help="Where the story takes place")
    parser.add_argument("--theme", type=str, default="", help="Theme label")
    parser.add_argument("--topic", type=str, default="", help="Story title")
    parser.add_argument(
        "--language",
        type=str,
        choices=["en", "tr"],
        default=None,
        help="Story language (default: STORY_LANGUAGE or en)",
    )
    parser.add_argument("--uid", type=str, default="local-user", help="User id that owns the images")
    parser.add_argument("--token", type=str, default=None, help="Firebase ID token for the generation service")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use canned offline responses instead of the generation service",
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
        help="Print the story JSON to the terminal instead of saving to file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress information",
    )

    args = parser.parse_args()

    configure_logging(json_format=False, level=logging.INFO if args.verbose else logging.WARNING)

    if args.mock:
        client = MockGenerationClient()
        uploader = LocalBlobStore(MEDIA_DIR)
        audio_store = LocalAudioStore(MEDIA_DIR)
    else:
        client = get_generation_client(args.token)
        uploader = get_blob_uploader(args.token)
        audio_store = get_audio_store()

    principal = Principal(uid=args.uid, id_token=args.token)
    pipeline = StoryPipeline(
        client,
        uploader,
        audio_store,
        lambda: principal,
        language=args.language,
    )

    if args.verbose:
        pipeline.subscribe(
            lambda state: print(f"[{state.progress:3d}%] {state.status.value}: {state.current_step}")
        )

    params = StoryGenerationParams(
        prompt=args.prompt,
        length=StoryLength(args.length),
        main_character=args.character,
        location=args.location,
        theme=args.theme,
        topic=args.topic,
    )

    story = asyncio.run(pipeline.start_generation(params))

    if story is None:
        print(f"Generation failed: {pipeline.state.error}", file=sys.stderr)
        sys.exit(1)

    formatted = json.dumps(story.to_dict(), indent=2, ensure_ascii=False)

    if args.stdout:
        print(formatted)
    else:
        # Determine output path
        output_dir = Path(__file__).parent.parent / "output"
        output_dir.mkdir(exist_ok=True)

        if args.output:
            filename = args.output if args.output.endswith(".json") else f"{args.output}.json"
        else:
            # Auto-generate filename from prompt and timestamp
            slug = re.sub(r"[^a-z0-9]+", "_", args.prompt.lower())[:30].strip("_")
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{slug}_{timestamp}.json"

        output_path = output_dir / filename
        output_path.write_text(formatted, encoding="utf-8")
        print(f"Story saved to: {output_path}")

    # Print summary if verbose
    if args.verbose:
        print("\n--- Generation Summary ---")
        print(f"Title: {story.title}")
        print(f"Pages: {len(story.pages)}")
        print(f"Images: {story.image_count}/{len(story.pages)}")
        print(f"Audio: {story.audio_count}/{len(story.pages)}")
        for warning in pipeline.state.warnings:
            print(f"Warning: {warning}")


if __name__ == "__main__":
    main()
