"""
Split generated story text into pages and derive per-page image prompts.

The model is asked to separate pages with a literal delimiter. It sometimes
repeats the story title as the first line of page one; that line is removed
with a length heuristic.
"""

import re

from storybox.config.image import IMAGE_CONSTANTS, IMAGE_PROMPT_TEMPLATE
from storybox.config.story import STORY_CONSTANTS
from ..errors import PageParseError
from ..types import Page, StoryGenerationParams


def parse_into_pages(raw_text: str, delimiter: str) -> list[str]:
    """
    Split raw story text into ordered page contents.

    Args:
        raw_text: Full text returned by text generation
        delimiter: Literal separator between pages

    Returns:
        Non-empty, trimmed page texts in order

    Raises:
        PageParseError: If no non-empty page remains
    """
    pages = [segment.strip() for segment in (raw_text or "").split(delimiter)]
    pages = [segment for segment in pages if segment]

    if not pages:
        raise PageParseError()

    pages[0] = strip_title_line(pages[0])
    return pages


def strip_title_line(
    text: str,
    max_length: int = STORY_CONSTANTS["title_max_length"],
    markup_chars: str = STORY_CONSTANTS["title_markup_chars"],
) -> str:
    """
    Remove a leading title line from the first page.

    The first line counts as a title when the page has more than one line
    and the line, with markup characters removed, is non-empty and shorter
    than max_length.
    """
    lines = text.split("\n")
    if len(lines) < 2:
        return text

    markup = re.escape(markup_chars)
    first_line = re.sub(rf"^[{markup}]+\s*", "", lines[0])
    first_line = re.sub(rf"[{markup}]", "", first_line).strip()

    if 0 < len(first_line) < max_length:
        remainder = "\n".join(lines[1:]).strip()
        if remainder:
            return remainder
    return text


def build_image_prompt(main_character: str, location: str, page_text: str) -> str:
    """Build the illustration prompt for one page."""
    excerpt = page_text[: IMAGE_CONSTANTS["prompt_excerpt_length"]]
    return IMAGE_PROMPT_TEMPLATE.format(
        main_character=main_character,
        location=location,
        scene=excerpt,
    )


def build_pages(raw_pages: list[str], params: StoryGenerationParams) -> list[Page]:
    """Number parsed pages from 1 and attach their image prompts."""
    return [
        Page(
            page_number=index + 1,
            content=content.strip(),
            image_prompt=build_image_prompt(params.main_character, params.location, content),
        )
        for index, content in enumerate(raw_pages)
    ]
