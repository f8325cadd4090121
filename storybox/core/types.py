"""
Centralized domain types for the story pipeline.

All dataclasses that are used across multiple modules are defined here
to make data flow explicit and avoid circular imports.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


# =============================================================================
# Input Types
# =============================================================================


class StoryLength(str, Enum):
    """Requested story length; selects the target page count."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


@dataclass(frozen=True)
class StoryGenerationParams:
    """Everything the user chose on the create-story screen."""

    prompt: str
    length: StoryLength = StoryLength.SHORT
    main_character: str = ""
    location: str = ""
    theme: str = ""
    topic: str = ""

    def __post_init__(self):
        # Accept plain strings from callers that don't use the enum
        if not isinstance(self.length, StoryLength):
            object.__setattr__(self, "length", StoryLength(self.length))


@dataclass(frozen=True)
class Principal:
    """The signed-in user a run is performed for."""

    uid: str
    id_token: Optional[str] = None


# =============================================================================
# Story Types
# =============================================================================


@dataclass(frozen=True)
class Page:
    """One page of story text with its optional illustration and narration."""

    page_number: int  # 1-based, contiguous
    content: str
    image_prompt: str
    image_url: Optional[str] = None  # Stays None if every image attempt failed
    audio_url: Optional[str] = None  # Stays None if narration failed

    def with_image(self, image_url: str) -> "Page":
        return replace(self, image_url=image_url)

    def with_audio(self, audio_url: str) -> "Page":
        return replace(self, audio_url=audio_url)


@dataclass(frozen=True)
class GeneratedStory:
    """The assembled result of a successful run."""

    title: str
    full_content: str
    pages: tuple[Page, ...] = field(default_factory=tuple)

    @property
    def image_count(self) -> int:
        return sum(1 for page in self.pages if page.image_url)

    @property
    def audio_count(self) -> int:
        return sum(1 for page in self.pages if page.audio_url)

    @property
    def is_degraded(self) -> bool:
        """True when at least one page is missing its image or audio."""
        return any(page.image_url is None or page.audio_url is None for page in self.pages)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "full_content": self.full_content,
            "pages": [
                {
                    "page_number": page.page_number,
                    "content": page.content,
                    "image_prompt": page.image_prompt,
                    "image_url": page.image_url,
                    "audio_url": page.audio_url,
                }
                for page in self.pages
            ],
        }


# =============================================================================
# Remote Call Results
# =============================================================================


@dataclass(frozen=True)
class TextResult:
    """Response of the generateStory callable."""

    success: bool
    story: str = ""
    prompt_tokens: int = 0
    total_tokens: int = 0

    @property
    def has_text(self) -> bool:
        return self.success and bool(self.story and self.story.strip())

    @classmethod
    def from_payload(cls, payload: dict) -> "TextResult":
        return cls(
            success=bool(payload.get("success")),
            story=payload.get("story") or "",
            prompt_tokens=int(payload.get("promptTokens") or 0),
            total_tokens=int(payload.get("totalTokens") or 0),
        )


@dataclass(frozen=True)
class ImageResult:
    """Response of the generateImage callable.

    ``success`` can be true while ``image_base64`` is empty; callers must
    check ``has_image`` rather than ``success``.
    """

    success: bool
    image_base64: str = ""
    mime_type: str = "image/png"

    @property
    def has_image(self) -> bool:
        return self.success and bool(self.image_base64)

    @classmethod
    def from_payload(cls, payload: dict) -> "ImageResult":
        return cls(
            success=bool(payload.get("success")),
            image_base64=payload.get("imageBase64") or "",
            mime_type=payload.get("mimeType") or "image/png",
        )


@dataclass(frozen=True)
class SpeechResult:
    """Response of the generateSpeech callable. Same soft-failure shape as images."""

    success: bool
    audio_base64: str = ""
    mime_type: str = "audio/mpeg"

    @property
    def has_audio(self) -> bool:
        return self.success and bool(self.audio_base64)

    @classmethod
    def from_payload(cls, payload: dict) -> "SpeechResult":
        return cls(
            success=bool(payload.get("success")),
            audio_base64=payload.get("audioBase64") or "",
            mime_type=payload.get("mimeType") or "audio/mpeg",
        )


@dataclass(frozen=True)
class CreditResult:
    """Response of the decrementCredit callable."""

    success: bool
    remaining_uses: int = 0

    @classmethod
    def from_payload(cls, payload: dict) -> "CreditResult":
        return cls(
            success=bool(payload.get("success")),
            remaining_uses=int(payload.get("remainingUses") or 0),
        )
