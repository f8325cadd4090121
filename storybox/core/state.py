"""
Observable generation state.

A GenerationState is an immutable snapshot. The pipeline replaces it
wholesale on every step, and __post_init__ rejects combinations that can't
occur in a real run (a complete state without a story, an error state
without a message, 100% progress before completion).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .types import GeneratedStory


class GenerationStatus(str, Enum):
    """Lifecycle of a run, in order of progress."""

    IDLE = "idle"
    GENERATING_TEXT = "generating_text"
    GENERATING_IMAGES = "generating_images"
    GENERATING_AUDIO = "generating_audio"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationStatus.COMPLETE, GenerationStatus.ERROR)

    @property
    def is_active(self) -> bool:
        return self != GenerationStatus.IDLE and not self.is_terminal


@dataclass(frozen=True)
class MediaProgress:
    """Per-resource counter, e.g. 2 of 4 images done."""

    current: int = 0
    total: int = 0

    def __post_init__(self):
        if self.current < 0 or self.total < 0 or self.current > self.total:
            raise ValueError(f"Invalid media progress {self.current}/{self.total}")


@dataclass(frozen=True)
class GenerationState:
    """Snapshot of a generation run as seen by the presentation layer."""

    status: GenerationStatus = GenerationStatus.IDLE
    story: Optional[GeneratedStory] = None
    progress: int = 0  # 0-100, never decreases within a run
    current_step: str = ""
    error: Optional[str] = None
    image_progress: MediaProgress = field(default_factory=MediaProgress)
    audio_progress: MediaProgress = field(default_factory=MediaProgress)
    warnings: tuple[str, ...] = ()  # Non-fatal media failures

    def __post_init__(self):
        if not 0 <= self.progress <= 100:
            raise ValueError(f"Progress out of range: {self.progress}")

        is_complete = self.status == GenerationStatus.COMPLETE
        if is_complete != (self.story is not None):
            raise ValueError("A story is present exactly when status is complete")
        if is_complete != (self.progress == 100):
            raise ValueError("Progress is 100 exactly when status is complete")

        is_error = self.status == GenerationStatus.ERROR
        if is_error != (self.error is not None):
            raise ValueError("An error message is present exactly when status is error")

    @classmethod
    def idle(cls) -> "GenerationState":
        return cls()

    @classmethod
    def failed(cls, message: str, previous: Optional["GenerationState"] = None) -> "GenerationState":
        """Terminal error state; keeps the counters the run reached but never a story."""
        previous = previous or cls()
        progress = previous.progress if previous.progress < 100 else 99
        return cls(
            status=GenerationStatus.ERROR,
            story=None,
            progress=progress,
            current_step="",
            error=message,
            image_progress=previous.image_progress,
            audio_progress=previous.audio_progress,
            warnings=previous.warnings,
        )


INITIAL_STATE = GenerationState.idle()
