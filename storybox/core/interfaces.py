"""Capability contracts the pipeline depends on.

Concrete implementations live in storybox.integrations; tests substitute
AsyncMock objects with the same shape.
"""

from typing import Callable, Optional, Protocol

from .types import CreditResult, ImageResult, Principal, SpeechResult, TextResult


class GenerationClient(Protocol):
    """Remote text, image and speech generation plus credit accounting."""

    async def generate_text(self, prompt: str) -> TextResult: ...

    async def generate_image(self, prompt: str) -> ImageResult: ...

    async def generate_speech(
        self,
        text: str,
        voice: str,
        model: str,
        instructions: Optional[str] = None,
    ) -> SpeechResult: ...

    async def decrement_credit(self) -> CreditResult: ...


class BlobUploader(Protocol):
    """Stores an encoded image and returns a retrievable URL."""

    async def upload(self, base64_payload: str, owner_id: str) -> str: ...


class AudioStore(Protocol):
    """Persists narration audio and returns a playable reference."""

    async def persist(self, base64_payload: str) -> str: ...


PrincipalProvider = Callable[[], Optional[Principal]]
