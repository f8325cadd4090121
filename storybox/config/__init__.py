"""
Configuration module for the story pipeline.

Re-exports all configuration for convenience.
"""

from .story import (
    STORY_CONSTANTS,
    build_generation_rules,
    get_fallback_title,
    get_page_count,
    get_page_delimiter,
)
from .image import IMAGE_CONSTANTS, image_backoff
from .speech import TTS_CONFIG
from .functions import (
    CALL_TIMEOUT,
    MEDIA_DIR,
    get_audio_store,
    get_blob_uploader,
    get_generation_client,
)

__all__ = [
    # Story
    "STORY_CONSTANTS",
    "build_generation_rules",
    "get_fallback_title",
    "get_page_count",
    "get_page_delimiter",
    # Image
    "IMAGE_CONSTANTS",
    "image_backoff",
    # Speech
    "TTS_CONFIG",
    # Remote services
    "CALL_TIMEOUT",
    "MEDIA_DIR",
    "get_audio_store",
    "get_blob_uploader",
    "get_generation_client",
]
