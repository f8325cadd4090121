"""
Offline stand-in for the generation callables.

Returns a canned three-page bedtime story, a 1x1 PNG and a short audio
clip so the whole pipeline (and the loading UI) can be exercised without
network access or credits.
"""

import asyncio
import base64
import logging
from typing import Optional

from storybox.config.story import STORY_CONSTANTS
from storybox.core.types import CreditResult, ImageResult, SpeechResult, TextResult

logger = logging.getLogger(__name__)

MOCK_STORIES = {
    "en": [
        "The Little Bear's Sleepy Adventure\nOnce upon a time there was a little bear who could not fall asleep. "
        "Every night he tossed and turned while his mother sang him lullabies.",
        "One night his mother told him about the magic of the moonlight. "
        "\"The moon will watch over you and bring you sweet dreams,\" she said.",
        "The little bear looked up at the moon shining through his window. "
        "His eyes slowly closed, and he drifted into the sweetest dreams.",
    ],
    "tr": [
        "Küçük Ayı'nın Uyku Macerası\nBir zamanlar, küçük bir ayı vardı. Her gece uyumakta zorluk çekiyordu. "
        "Annesi her gece ona ninni söylerdi ama küçük ayı hala uyanık kalırdı.",
        "Bir gece, annesi ona ay ışığının büyüsünü anlattı. "
        "'Ay seni koruyacak ve güzel rüyalar getirecek' dedi.",
        "Küçük ayı pencereden parlayan aya baktı. "
        "Gözleri yavaşça kapandı ve tatlı rüyalara daldı.",
    ],
}

# 1x1 transparent PNG
MOCK_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

# ID3 header followed by silence
MOCK_AUDIO_BASE64 = base64.b64encode(b"ID3\x04\x00\x00\x00\x00\x00\x00" + bytes(64)).decode("ascii")


class MockGenerationClient:
    """
    GenerationClient that never leaves the process.

    The story language follows the page delimiter requested in the prompt.

    Args:
        latency: Seconds to wait per call, to make progress visible
        remaining_uses: Credits reported by decrement_credit
    """

    def __init__(self, latency: float = 0.0, remaining_uses: int = 99):
        self.latency = latency
        self.remaining_uses = remaining_uses

    async def _delay(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    async def generate_text(self, prompt: str) -> TextResult:
        await self._delay()
        language = self._detect_language(prompt)
        delimiter = STORY_CONSTANTS["page_delimiters"][language]
        story = f"\n\n{delimiter}\n\n".join(MOCK_STORIES[language])
        logger.info(f"Mock story generated ({language})")
        return TextResult(success=True, story=story, prompt_tokens=len(prompt.split()), total_tokens=0)

    async def generate_image(self, prompt: str) -> ImageResult:
        await self._delay()
        return ImageResult(success=True, image_base64=MOCK_IMAGE_BASE64, mime_type="image/png")

    async def generate_speech(
        self,
        text: str,
        voice: str,
        model: str,
        instructions: Optional[str] = None,
    ) -> SpeechResult:
        await self._delay()
        return SpeechResult(success=True, audio_base64=MOCK_AUDIO_BASE64, mime_type="audio/mpeg")

    async def decrement_credit(self) -> CreditResult:
        await self._delay()
        self.remaining_uses = max(self.remaining_uses - 1, 0)
        return CreditResult(success=True, remaining_uses=self.remaining_uses)

    @staticmethod
    def _detect_language(prompt: str) -> str:
        for language, delimiter in STORY_CONSTANTS["page_delimiters"].items():
            if delimiter in prompt:
                return language
        return "en"
