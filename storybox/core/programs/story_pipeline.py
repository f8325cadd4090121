"""
Story generation pipeline.

One run goes through four phases in order:
1. Generate the story text and split it into pages
2. Illustrate every page (bounded retries, a page may end up without an image)
3. Narrate every page (single attempt, a page may end up without audio)
4. Decrement the user's credit (best effort) and assemble the story

Text and parsing failures abort the run. Media failures only degrade the
affected page. Every step replaces the observable GenerationState snapshot
and notifies subscribers.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import replace
from typing import Awaitable, Callable, Optional

from storybox.config.functions import CALL_TIMEOUT
from storybox.config.image import IMAGE_CONSTANTS
from storybox.config.story import (
    build_generation_rules,
    get_fallback_title,
    get_page_count,
    get_page_delimiter,
)
from storybox.logging import story_logger
from ..cancellation import CancellationToken
from ..errors import (
    DEFAULT_ERROR_MESSAGE,
    GenerationCancelled,
    SignInRequiredError,
    StoryGenerationError,
    TextGenerationError,
)
from ..interfaces import AudioStore, BlobUploader, GenerationClient, PrincipalProvider
from ..modules.page_illustrator import PageIllustrator
from ..modules.page_narrator import PageNarrator
from ..modules.page_parser import build_pages, parse_into_pages
from ..progress import STEP_LABELS, calculate_percentage
from ..state import INITIAL_STATE, GenerationState, GenerationStatus, MediaProgress
from ..types import GeneratedStory, Page, Principal, StoryGenerationParams

logger = logging.getLogger(__name__)

StateListener = Callable[[GenerationState], None]


class StoryPipeline:
    """
    Orchestrates a story generation run and owns its observable state.

    A pipeline runs at most one generation at a time. Starting while busy is
    a logged no-op. cancel() and reset() return the state to idle at once;
    the abandoned run stops at its next checkpoint and never publishes again.

    Args:
        client: Remote text, image and speech generation
        uploader: Stores generated images
        audio_store: Stores narration audio
        get_principal: Returns the signed-in user, or None
        language: Story language ("en" or "tr"); selects delimiter, rules and fallback title
        max_image_attempts: Attempts per page before giving up on its image
        image_request_delay: Seconds to wait between pages in the image phase
        image_retry_base_delay: Backoff step between image attempts
        call_timeout: Timeout for each remote call
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        client: GenerationClient,
        uploader: BlobUploader,
        audio_store: AudioStore,
        get_principal: PrincipalProvider,
        *,
        language: Optional[str] = None,
        max_image_attempts: int = IMAGE_CONSTANTS["max_attempts"],
        image_request_delay: float = IMAGE_CONSTANTS["inter_request_delay"],
        image_retry_base_delay: float = IMAGE_CONSTANTS["retry_base_delay"],
        call_timeout: float = CALL_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.get_principal = get_principal
        self.language = language
        self.image_request_delay = image_request_delay
        self.call_timeout = call_timeout
        self._sleep = sleep

        self.illustrator = PageIllustrator(
            client,
            uploader,
            max_attempts=max_image_attempts,
            retry_base_delay=image_retry_base_delay,
            call_timeout=call_timeout,
            sleep=sleep,
        )
        self.narrator = PageNarrator(client, audio_store, call_timeout=call_timeout)

        self._state: GenerationState = INITIAL_STATE
        self._listeners: list[StateListener] = []
        self._token: Optional[CancellationToken] = None

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def is_generating(self) -> bool:
        return self._token is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every published snapshot.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start_generation(self, params: StoryGenerationParams) -> Optional[GeneratedStory]:
        """
        Run a full generation.

        Returns:
            The assembled story, or None if the run was rejected, failed or
            was cancelled (the reason is on the state snapshot)

        Raises:
            Exception: Unexpected errors are re-raised after the state moves to error
        """
        if self._token is not None:
            logger.warning("Generation already in progress, ignoring start request")
            return None

        principal = self.get_principal()
        if principal is None:
            error = SignInRequiredError()
            logger.warning("Generation requested without a signed-in user")
            self._set_state(GenerationState.failed(error.user_message))
            return None

        token = CancellationToken()
        self._token = token
        run_id = uuid.uuid4().hex[:12]

        try:
            return await self._run(params, principal, token, run_id)

        except GenerationCancelled:
            story_logger.generation_cancelled(run_id)
            return None

        except StoryGenerationError as e:
            if token.cancelled:
                story_logger.generation_cancelled(run_id)
                return None
            story_logger.generation_failed(run_id, e, stage=self._state.status.value)
            self._publish(token, GenerationState.failed(e.user_message, self._state))
            return None

        except Exception as e:
            story_logger.generation_failed(run_id, e, stage=self._state.status.value)
            self._publish(token, GenerationState.failed(DEFAULT_ERROR_MESSAGE, self._state))
            raise

        finally:
            # A cancelled run may finish after a new one has started
            if self._token is token:
                self._token = None

    def cancel(self) -> None:
        """Abandon the current run and return to the idle snapshot immediately."""
        if self._token is not None:
            logger.info("Cancelling generation in progress")
            self._token.cancel()
            self._token = None
        self._set_state(INITIAL_STATE)

    def reset(self) -> None:
        """Return to idle, e.g. after a completed or failed run."""
        self.cancel()

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    async def _run(
        self,
        params: StoryGenerationParams,
        principal: Principal,
        token: CancellationToken,
        run_id: str,
    ) -> GeneratedStory:
        start_time = time.time()
        story_logger.generation_started(run_id, params.length.value)

        self._publish(
            token,
            GenerationState(
                status=GenerationStatus.GENERATING_TEXT,
                progress=calculate_percentage(GenerationStatus.GENERATING_TEXT),
                current_step=STEP_LABELS["text"],
            ),
        )

        phase_start = time.time()
        raw_text = await self._generate_text(params, token)
        raw_pages = parse_into_pages(raw_text, get_page_delimiter(self.language))
        pages = build_pages(raw_pages, params)
        title = params.topic.strip() or get_fallback_title(self.language)
        story_logger.stage_completed(run_id, "text", time.time() - phase_start)

        phase_start = time.time()
        pages = await self._illustrate_pages(pages, principal, token, run_id)
        story_logger.stage_completed(run_id, "images", time.time() - phase_start)

        phase_start = time.time()
        pages = await self._narrate_pages(pages, token, run_id)
        story_logger.stage_completed(run_id, "audio", time.time() - phase_start)

        self._advance(
            token,
            status=GenerationStatus.FINALIZING,
            progress=calculate_percentage(GenerationStatus.FINALIZING),
            current_step=STEP_LABELS["finalizing"],
        )
        await self._decrement_credit(token, run_id)
        token.raise_if_cancelled()

        story = GeneratedStory(title=title, full_content=raw_text, pages=tuple(pages))
        self._advance(
            token,
            status=GenerationStatus.COMPLETE,
            story=story,
            progress=100,
            current_step=STEP_LABELS["complete"],
        )

        story_logger.generation_completed(
            run_id,
            time.time() - start_time,
            pages=len(story.pages),
            images=story.image_count,
            audio=story.audio_count,
        )
        return story

    async def _generate_text(self, params: StoryGenerationParams, token: CancellationToken) -> str:
        """Generate the raw story text. Raises TextGenerationError or RemoteError."""
        token.raise_if_cancelled()

        page_count = get_page_count(params.length)
        prompt = params.prompt + build_generation_rules(page_count, self.language)

        try:
            result = await asyncio.wait_for(
                self.client.generate_text(prompt),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TextGenerationError("Story text generation timed out.") from e
        except OSError as e:
            raise TextGenerationError() from e

        token.raise_if_cancelled()

        if not result.has_text:
            raise TextGenerationError()

        logger.info(
            f"Story text received ({len(result.story)} chars, {result.total_tokens} tokens)"
        )
        return result.story

    async def _illustrate_pages(
        self,
        pages: list[Page],
        principal: Principal,
        token: CancellationToken,
        run_id: str,
    ) -> list[Page]:
        total = len(pages)
        self._advance(
            token,
            status=GenerationStatus.GENERATING_IMAGES,
            progress=calculate_percentage(GenerationStatus.GENERATING_IMAGES, 0, total),
            current_step=STEP_LABELS["images"],
            image_progress=MediaProgress(0, total),
            audio_progress=MediaProgress(0, total),
        )

        illustrated = []
        for index, page in enumerate(pages):
            token.raise_if_cancelled()
            if index > 0:
                await self._sleep(self.image_request_delay)
                token.raise_if_cancelled()

            image_url = await self.illustrator.illustrate_page(page, principal.uid, token, run_id)

            warnings = self._state.warnings
            if image_url:
                page = page.with_image(image_url)
            else:
                warnings += (f"Image for page {page.page_number} unavailable",)
            illustrated.append(page)

            done = index + 1
            self._advance(
                token,
                progress=calculate_percentage(GenerationStatus.GENERATING_IMAGES, done, total),
                current_step=STEP_LABELS["images_done" if done == total else "images"],
                image_progress=MediaProgress(done, total),
                warnings=warnings,
            )

        return illustrated

    async def _narrate_pages(
        self,
        pages: list[Page],
        token: CancellationToken,
        run_id: str,
    ) -> list[Page]:
        total = len(pages)
        self._advance(
            token,
            status=GenerationStatus.GENERATING_AUDIO,
            progress=calculate_percentage(GenerationStatus.GENERATING_AUDIO, 0, total),
            current_step=STEP_LABELS["audio"],
        )

        narrated = []
        for index, page in enumerate(pages):
            token.raise_if_cancelled()

            audio_url = await self.narrator.narrate_page(page, token, run_id)

            warnings = self._state.warnings
            if audio_url:
                page = page.with_audio(audio_url)
            else:
                warnings += (f"Audio for page {page.page_number} unavailable",)
            narrated.append(page)

            done = index + 1
            self._advance(
                token,
                progress=calculate_percentage(GenerationStatus.GENERATING_AUDIO, done, total),
                audio_progress=MediaProgress(done, total),
                warnings=warnings,
            )

        return narrated

    async def _decrement_credit(self, token: CancellationToken, run_id: str) -> None:
        """Use up one credit. Failures are logged and never fail the run."""
        token.raise_if_cancelled()
        try:
            result = await asyncio.wait_for(
                self.client.decrement_credit(),
                timeout=self.call_timeout,
            )
        except Exception as e:
            logger.warning(
                f"Credit decrement failed: {type(e).__name__}: {e}",
                extra={"run_id": run_id},
            )
            return

        if result.success:
            logger.info(
                f"Credit decremented, {result.remaining_uses} remaining",
                extra={"run_id": run_id},
            )
        else:
            logger.warning("Credit decrement reported failure", extra={"run_id": run_id})

    # -------------------------------------------------------------------------
    # State publication
    # -------------------------------------------------------------------------

    def _advance(self, token: CancellationToken, **changes) -> None:
        """Publish a copy of the current state with changes applied."""
        token.raise_if_cancelled()
        if "progress" in changes:
            changes["progress"] = max(self._state.progress, changes["progress"])
        self._publish(token, replace(self._state, **changes))

    def _publish(self, token: CancellationToken, state: GenerationState) -> bool:
        """Publish state on behalf of a run. Discarded if the run is no longer current."""
        if token.cancelled or self._token is not token:
            return False
        self._set_state(state)
        return True

    def _set_state(self, state: GenerationState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.warning("State listener raised", exc_info=True)
