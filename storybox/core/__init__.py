# Storybox - Core Domain

# Re-export types for convenient access
from .types import (
    StoryLength,
    StoryGenerationParams,
    Principal,
    Page,
    GeneratedStory,
)

__all__ = [
    "StoryLength",
    "StoryGenerationParams",
    "Principal",
    "Page",
    "GeneratedStory",
]
