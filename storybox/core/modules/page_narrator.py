"""Module for narrating story pages with text-to-speech.

Narration is attempted once per page. A failed or empty response leaves the
page without audio; it is never retried.
"""

import asyncio
import logging
from typing import Optional

from storybox.config.functions import CALL_TIMEOUT
from storybox.config.speech import TTS_CONFIG
from storybox.logging import story_logger
from ..cancellation import CancellationToken
from ..errors import GenerationCancelled
from ..interfaces import AudioStore, GenerationClient
from ..types import Page

logger = logging.getLogger(__name__)


class PageNarrator:
    """Generate and persist narration audio for a single page."""

    def __init__(
        self,
        client: GenerationClient,
        audio_store: AudioStore,
        voice: str = TTS_CONFIG["voice"],
        model: str = TTS_CONFIG["model"],
        instructions: Optional[str] = TTS_CONFIG["instructions"],
        max_text_length: int = TTS_CONFIG["max_text_length"],
        call_timeout: float = CALL_TIMEOUT,
    ):
        self.client = client
        self.audio_store = audio_store
        self.voice = voice
        self.model = model
        self.instructions = instructions
        self.max_text_length = max_text_length
        self.call_timeout = call_timeout

    async def narrate_page(
        self,
        page: Page,
        token: CancellationToken,
        run_id: str = "",
    ) -> Optional[str]:
        """
        Narrate a page.

        Returns:
            Reference to the stored audio, or None if narration failed

        Raises:
            GenerationCancelled: If the run was cancelled while the call was in flight
        """
        token.raise_if_cancelled()

        try:
            result = await asyncio.wait_for(
                self.client.generate_speech(
                    page.content[: self.max_text_length],
                    self.voice,
                    self.model,
                    self.instructions,
                ),
                timeout=self.call_timeout,
            )
            token.raise_if_cancelled()

            if not result.has_audio:
                story_logger.media_degraded(run_id, "audio", page.page_number, "no audio payload in response")
                return None

            reference = await asyncio.wait_for(
                self.audio_store.persist(result.audio_base64),
                timeout=self.call_timeout,
            )
        except GenerationCancelled:
            raise
        except Exception as e:
            story_logger.media_degraded(run_id, "audio", page.page_number, f"{type(e).__name__}: {e}")
            return None

        logger.info(f"Audio {page.page_number} saved to {reference}")
        return reference or None
