"""Background generation manager: one pipeline per user, each run an asyncio task."""

import asyncio
import logging
from typing import Callable, Optional

import httpx

from storybox.config.functions import (
    CALL_TIMEOUT,
    get_audio_store,
    get_blob_uploader,
    get_generation_client,
)
from storybox.core.programs.story_pipeline import StoryPipeline
from storybox.core.state import INITIAL_STATE, GenerationState
from storybox.core.types import Principal, StoryGenerationParams

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[Principal, Optional[str]], StoryPipeline]


class GenerationInProgressError(Exception):
    """The user already has a generation running."""

    def __init__(self, uid: str):
        super().__init__(f"A generation is already running for {uid}")
        self.uid = uid


class GenerationManager:
    """
    Runs story generations in the background.

    Each user gets a fresh StoryPipeline per run (so the run uses the
    credentials it was started with) and the latest pipeline answers state
    queries until the next run starts.

    Args:
        pipeline_factory: Builds a pipeline for (principal, language).
                          Defaults to the configured remote service and stores.
    """

    def __init__(self, pipeline_factory: Optional[PipelineFactory] = None):
        self._factory = pipeline_factory or self._build_pipeline
        self._pipelines: dict[str, StoryPipeline] = {}
        self._tasks: set[asyncio.Task] = set()
        self._http_client: Optional[httpx.AsyncClient] = None

    def _build_pipeline(self, principal: Principal, language: Optional[str]) -> StoryPipeline:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=CALL_TIMEOUT)

        return StoryPipeline(
            get_generation_client(principal.id_token, http_client=self._http_client),
            get_blob_uploader(principal.id_token, http_client=self._http_client),
            get_audio_store(),
            lambda: principal,
            language=language,
        )

    async def start(
        self,
        principal: Principal,
        params: StoryGenerationParams,
        language: Optional[str] = None,
    ) -> GenerationState:
        """
        Start a generation for a user.

        Returns:
            The state once the run has started

        Raises:
            GenerationInProgressError: If the user's previous run is still active
        """
        current = self._pipelines.get(principal.uid)
        if current is not None and current.is_generating:
            raise GenerationInProgressError(principal.uid)

        pipeline = self._factory(principal, language)
        self._pipelines[principal.uid] = pipeline

        task = asyncio.create_task(self._run(principal.uid, pipeline, params))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        # Let the run publish its first state before answering
        await asyncio.sleep(0)
        return pipeline.state

    async def _run(self, uid: str, pipeline: StoryPipeline, params: StoryGenerationParams) -> None:
        try:
            story = await pipeline.start_generation(params)
        except Exception:
            # The pipeline state already records the error
            logger.exception(f"Generation task for {uid} crashed")
            return

        if story is not None:
            logger.info(f"Generation for {uid} finished: {story.title!r}")

    def get_state(self, uid: str) -> GenerationState:
        pipeline = self._pipelines.get(uid)
        return pipeline.state if pipeline is not None else INITIAL_STATE

    def is_generating(self, uid: str) -> bool:
        pipeline = self._pipelines.get(uid)
        return pipeline is not None and pipeline.is_generating

    def cancel(self, uid: str) -> GenerationState:
        """Cancel the user's run (if any), forget its pipeline and return the idle state."""
        pipeline = self._pipelines.pop(uid, None)
        if pipeline is not None:
            pipeline.cancel()
        return INITIAL_STATE

    async def shutdown(self) -> None:
        """Cancel all runs, wait for their tasks and close the HTTP client."""
        for pipeline in self._pipelines.values():
            pipeline.cancel()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._pipelines.clear()

        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


# Global instance
generation_manager = GenerationManager()
