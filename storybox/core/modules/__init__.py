# Text
from .page_parser import parse_into_pages, build_image_prompt, build_pages

# Media
from .page_illustrator import PageIllustrator
from .page_narrator import PageNarrator

__all__ = [
    # Text
    "parse_into_pages",
    "build_image_prompt",
    "build_pages",
    # Media
    "PageIllustrator",
    "PageNarrator",
]
