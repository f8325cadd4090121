"""Unit tests for the background generation manager."""

import asyncio

import pytest

from storybox.api.services.generation_manager import GenerationInProgressError, GenerationManager
from storybox.core.state import INITIAL_STATE, GenerationStatus
from storybox.core.types import Principal, StoryGenerationParams, TextResult

PRINCIPAL = Principal(uid="user-1", id_token="id-token")

PARAMS = StoryGenerationParams(prompt="A bear", topic="Bear")

STORY = "Page one.\n---PAGE---\nPage two."


@pytest.fixture
def gate():
    return asyncio.Event()


@pytest.fixture
def manager(make_pipeline, client, gate):
    async def gated_text(prompt):
        await gate.wait()
        return TextResult(success=True, story=STORY)

    client.generate_text.side_effect = gated_text
    built = []

    def factory(principal, language):
        pipeline = make_pipeline(principal=principal, language=language or "en")
        built.append((principal, language))
        return pipeline

    manager = GenerationManager(pipeline_factory=factory)
    manager.built = built
    return manager


async def _wait_for_status(manager, uid, status, attempts=500):
    for _ in range(attempts):
        if manager.get_state(uid).status == status:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"status never reached {status}")


class TestGenerationManager:
    @pytest.mark.asyncio
    async def test_start_returns_running_state(self, manager, gate):
        state = await manager.start(PRINCIPAL, PARAMS)

        assert state.status == GenerationStatus.GENERATING_TEXT
        assert manager.is_generating("user-1")

        gate.set()
        await _wait_for_status(manager, "user-1", GenerationStatus.COMPLETE)
        assert manager.get_state("user-1").story.title == "Bear"
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_second_start_while_running_is_rejected(self, manager, gate):
        await manager.start(PRINCIPAL, PARAMS)

        with pytest.raises(GenerationInProgressError):
            await manager.start(PRINCIPAL, PARAMS)

        assert len(manager.built) == 1
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_users_run_independently(self, manager):
        await manager.start(PRINCIPAL, PARAMS)
        state = await manager.start(Principal(uid="user-2"), PARAMS, language="tr")

        assert state.status == GenerationStatus.GENERATING_TEXT
        assert manager.built[1] == (Principal(uid="user-2"), "tr")
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_cancel_returns_idle_and_allows_restart(self, manager):
        await manager.start(PRINCIPAL, PARAMS)

        state = manager.cancel("user-1")

        assert state == INITIAL_STATE
        assert not manager.is_generating("user-1")

        restarted = await manager.start(PRINCIPAL, PARAMS)
        assert restarted.status == GenerationStatus.GENERATING_TEXT
        await manager.shutdown()

    def test_unknown_user_is_idle(self, manager):
        assert manager.get_state("nobody") == INITIAL_STATE
        assert manager.cancel("nobody") == INITIAL_STATE

    @pytest.mark.asyncio
    async def test_shutdown_cancels_running_tasks(self, manager):
        await manager.start(PRINCIPAL, PARAMS)

        await manager.shutdown()

        assert manager.get_state("user-1") == INITIAL_STATE
        assert not manager.is_generating("user-1")

    @pytest.mark.asyncio
    async def test_finished_pipeline_is_kept_until_cancelled(self, manager, gate):
        await manager.start(PRINCIPAL, PARAMS)
        gate.set()
        await _wait_for_status(manager, "user-1", GenerationStatus.COMPLETE)

        assert manager.get_state("user-1").story is not None

        assert manager.cancel("user-1") == INITIAL_STATE
        assert "user-1" not in manager._pipelines
        assert manager.get_state("user-1") == INITIAL_STATE

    @pytest.mark.asyncio
    async def test_new_run_replaces_finished_pipeline(self, manager, gate):
        gate.set()
        await manager.start(PRINCIPAL, PARAMS)
        await _wait_for_status(manager, "user-1", GenerationStatus.COMPLETE)

        await manager.start(PRINCIPAL, PARAMS)
        await _wait_for_status(manager, "user-1", GenerationStatus.COMPLETE)

        assert list(manager._pipelines) == ["user-1"]
        assert len(manager.built) == 2
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_forgets_all_pipelines(self, manager):
        await manager.start(PRINCIPAL, PARAMS)
        await manager.start(Principal(uid="user-2"), PARAMS)

        await manager.shutdown()

        assert manager._pipelines == {}
