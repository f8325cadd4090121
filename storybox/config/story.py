"""
Story generation constants for the story pipeline.

Page counts, the page delimiter the model is asked to emit, and the
generation rules appended to every user prompt.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_LANGUAGE = os.getenv("STORY_LANGUAGE", "en")

# Story generation constants
STORY_CONSTANTS = {
    "page_delimiters": {
        "en": "---PAGE---",
        "tr": "---SAYFA---",
    },
    "page_counts": {
        "short": 2,
        "medium": 3,
        "long": 4,
    },
    "default_page_count": 2,
    "title_max_length": 80,  # First lines shorter than this are treated as a stray title
    "title_markup_chars": "#*",
    "fallback_titles": {
        "en": "Story",
        "tr": "Hikaye",
    },
}

GENERATION_RULES = {
    "en": """

CRITICAL RULES:
1. Write the story in English.
2. Split the story into EXACTLY {page_count} sections, no more and no fewer.
3. Separate every section with '{delimiter}'.
4. Each section should be 2-3 paragraphs long.
5. Keep the canonical appearance of well-known fairy tale characters (Shrek, Cinderella, etc.).
6. Keep the characters' physical appearance consistent on every page.""",
    "tr": """

KRİTİK KURALLAR:
1. Hikayeyi Türkçe yaz.
2. Hikayeyi TAM OLARAK {page_count} bölüme ayır, daha fazla veya daha az olmasın.
3. Her bölümü '{delimiter}' ile ayır.
4. Her bölüm 2-3 paragraf olsun.
5. Bilinen masal karakterlerinin (Shrek, Sindirella vb.) gerçek görünümlerini koru.
6. Karakterlerin fiziksel görünümünü tüm sayfalarda tutarlı tut.""",
}


def _language(language: str | None) -> str:
    language = language or DEFAULT_LANGUAGE
    return language if language in GENERATION_RULES else "en"


def get_page_count(length: str) -> int:
    """Map a story length ("short", "medium", "long") to a target page count."""
    return STORY_CONSTANTS["page_counts"].get(
        length, STORY_CONSTANTS["default_page_count"]
    )


def get_page_delimiter(language: str | None = None) -> str:
    """Get the literal separator the model places between pages."""
    return STORY_CONSTANTS["page_delimiters"][_language(language)]


def get_fallback_title(language: str | None = None) -> str:
    """Title used when the user left the topic empty."""
    return STORY_CONSTANTS["fallback_titles"][_language(language)]


def build_generation_rules(page_count: int, language: str | None = None) -> str:
    """Rules appended to the user's prompt before text generation."""
    language = _language(language)
    return GENERATION_RULES[language].format(
        page_count=page_count,
        delimiter=get_page_delimiter(language),
    )
