"""Pydantic models for API requests and responses."""

from .requests import StartGenerationRequest
from .responses import (
    GenerationStateResponse,
    MediaProgressResponse,
    PageResponse,
    StoryResponse,
)

__all__ = [
    "StartGenerationRequest",
    "GenerationStateResponse",
    "MediaProgressResponse",
    "PageResponse",
    "StoryResponse",
]
