"""Pydantic models for API responses."""

from typing import Optional

from pydantic import BaseModel

from storybox.core.state import GenerationState, GenerationStatus, MediaProgress
from storybox.core.types import GeneratedStory


class MediaProgressResponse(BaseModel):
    current: int
    total: int

    @classmethod
    def from_progress(cls, progress: MediaProgress) -> "MediaProgressResponse":
        return cls(current=progress.current, total=progress.total)


class PageResponse(BaseModel):
    """A single page with its optional illustration and narration."""

    page_number: int
    content: str
    image_prompt: str
    image_url: Optional[str] = None  # None when every image attempt failed
    audio_url: Optional[str] = None  # None when narration failed


class StoryResponse(BaseModel):
    """A completed story."""

    title: str
    full_content: str
    pages: list[PageResponse]

    @classmethod
    def from_story(cls, story: GeneratedStory) -> "StoryResponse":
        return cls(**story.to_dict())


class GenerationStateResponse(BaseModel):
    """Snapshot of the caller's generation. Poll until status is complete or error."""

    status: GenerationStatus
    progress: int  # 0-100
    current_step: str
    error: Optional[str] = None
    image_progress: MediaProgressResponse
    audio_progress: MediaProgressResponse
    warnings: list[str] = []
    story: Optional[StoryResponse] = None

    @classmethod
    def from_state(cls, state: GenerationState) -> "GenerationStateResponse":
        return cls(
            status=state.status,
            progress=state.progress,
            current_step=state.current_step,
            error=state.error,
            image_progress=MediaProgressResponse.from_progress(state.image_progress),
            audio_progress=MediaProgressResponse.from_progress(state.audio_progress),
            warnings=list(state.warnings),
            story=StoryResponse.from_story(state.story) if state.story else None,
        )
