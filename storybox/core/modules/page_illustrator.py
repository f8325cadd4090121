"""
Module for illustrating story pages one at a time.

Each page gets a bounded number of attempts. An attempt fails when the
provider raises, times out, or answers success with no image payload; a
failed attempt is followed by a growing backoff. When every attempt fails
the page is left without an image and the run continues.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
)

from storybox.config.functions import CALL_TIMEOUT
from storybox.config.image import IMAGE_CONSTANTS, wait_image_backoff
from storybox.logging import story_logger
from ..cancellation import CancellationToken
from ..errors import GenerationCancelled
from ..interfaces import BlobUploader, GenerationClient
from ..types import Page

logger = logging.getLogger(__name__)


def _is_empty(url: Optional[str]) -> bool:
    return not url


def _is_failed_attempt(error: BaseException) -> bool:
    # Task cancellation and run cancellation end the page instead of retrying
    return isinstance(error, Exception) and not isinstance(error, GenerationCancelled)


class PageIllustrator:
    """Generate and upload the illustration for a single page."""

    def __init__(
        self,
        client: GenerationClient,
        uploader: BlobUploader,
        max_attempts: int = IMAGE_CONSTANTS["max_attempts"],
        retry_base_delay: float = IMAGE_CONSTANTS["retry_base_delay"],
        call_timeout: float = CALL_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.uploader = uploader
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.call_timeout = call_timeout
        self._sleep = sleep

    async def illustrate_page(
        self,
        page: Page,
        owner_id: str,
        token: CancellationToken,
        run_id: str = "",
    ) -> Optional[str]:
        """
        Generate and upload an illustration for a page.

        Args:
            page: The page to illustrate (its image_prompt is sent as-is)
            owner_id: Storage owner for the uploaded image
            token: Run cancellation token, checked before every network call
            run_id: Identifier used in log records

        Returns:
            Download URL of the uploaded image, or None if every attempt failed

        Raises:
            GenerationCancelled: If the run was cancelled between attempts
        """

        def _before_sleep(retry_state) -> None:
            outcome = retry_state.outcome
            if outcome.failed:
                error = outcome.exception()
                reason = f"{type(error).__name__}: {error}"
            else:
                reason = "empty image payload"
            story_logger.retry_attempt(
                run_id,
                retry_state.attempt_number,
                f"image {page.page_number} {reason}, retrying in {retry_state.next_action.sleep:.1f}s",
            )

        def _exhausted(retry_state) -> None:
            story_logger.media_degraded(
                run_id,
                "image",
                page.page_number,
                f"all {retry_state.attempt_number} attempts failed, continuing without image",
            )
            return None

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_image_backoff(self.retry_base_delay),
            retry=retry_if_exception(_is_failed_attempt) | retry_if_result(_is_empty),
            before_sleep=_before_sleep,
            retry_error_callback=_exhausted,
            sleep=self._sleep,
        )
        return await retrying(self._attempt, page, owner_id, token)

    async def _attempt(
        self,
        page: Page,
        owner_id: str,
        token: CancellationToken,
    ) -> Optional[str]:
        """One generate + upload attempt. Returns None on an empty payload."""
        token.raise_if_cancelled()

        result = await asyncio.wait_for(
            self.client.generate_image(page.image_prompt),
            timeout=self.call_timeout,
        )
        token.raise_if_cancelled()

        if not result.has_image:
            logger.warning(f"Image {page.page_number}: no image payload in response")
            return None

        logger.info(
            f"Image {page.page_number} received ({len(result.image_base64)} chars), uploading"
        )
        url = await asyncio.wait_for(
            self.uploader.upload(result.image_base64, owner_id),
            timeout=self.call_timeout,
        )
        return url or None
