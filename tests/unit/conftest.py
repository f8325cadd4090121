"""Pytest fixtures for pipeline and API tests."""

from unittest.mock import AsyncMock

import pytest

from storybox.core.programs.story_pipeline import StoryPipeline
from storybox.core.types import (
    CreditResult,
    ImageResult,
    Principal,
    SpeechResult,
    StoryGenerationParams,
    TextResult,
)

DELIMITER = "---PAGE---"

TWO_PAGE_STORY = f"Once upon a time there was a bear.\n{DELIMITER}\nThe bear fell asleep under the moon."

TEST_PRINCIPAL = Principal(uid="user-123", id_token="firebase-id-token")


def make_client(story: str = TWO_PAGE_STORY) -> AsyncMock:
    """A GenerationClient whose every call succeeds."""
    client = AsyncMock()
    client.generate_text.return_value = TextResult(success=True, story=story, prompt_tokens=10, total_tokens=120)
    client.generate_image.return_value = ImageResult(success=True, image_base64="aW1hZ2U=")
    client.generate_speech.return_value = SpeechResult(success=True, audio_base64="YXVkaW8=")
    client.decrement_credit.return_value = CreditResult(success=True, remaining_uses=4)
    return client


def make_uploader() -> AsyncMock:
    uploader = AsyncMock()
    uploader.upload.side_effect = lambda payload, owner_id: f"https://cdn.example/{owner_id}/{uploader.upload.call_count}.png"
    return uploader


def make_audio_store() -> AsyncMock:
    store = AsyncMock()
    store.persist.side_effect = lambda payload: f"file:///audio/{store.persist.call_count}.mp3"
    return store


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def uploader():
    return make_uploader()


@pytest.fixture
def audio_store():
    return make_audio_store()


@pytest.fixture
def sleep():
    """Recorded stand-in for asyncio.sleep so retries and delays never wait."""
    return AsyncMock()


@pytest.fixture
def params():
    return StoryGenerationParams(
        prompt="A bear who cannot sleep",
        length="short",
        main_character="a small brown bear",
        location="a moonlit forest",
        theme="bedtime",
        topic="The Sleepy Bear",
    )


@pytest.fixture
def make_pipeline(client, uploader, audio_store, sleep):
    """Build a StoryPipeline wired to the mock collaborators."""

    def _make(principal=TEST_PRINCIPAL, **kwargs):
        kwargs.setdefault("language", "en")
        kwargs.setdefault("sleep", sleep)
        return StoryPipeline(
            kwargs.pop("client", client),
            kwargs.pop("uploader", uploader),
            kwargs.pop("audio_store", audio_store),
            lambda: principal,
            **kwargs,
        )

    return _make


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
def auth_headers():
    from storybox.api.auth.tokens import create_access_token

    token = create_access_token("user-123", id_token="firebase-id-token")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_manager():
    """A GenerationManager stand-in for route tests."""
    from unittest.mock import MagicMock

    from storybox.api.services.generation_manager import GenerationManager
    from storybox.core.state import INITIAL_STATE, GenerationState, GenerationStatus

    manager = MagicMock(spec=GenerationManager)
    manager.start = AsyncMock(
        return_value=GenerationState(
            status=GenerationStatus.GENERATING_TEXT,
            progress=5,
            current_step="Creating a new world...",
        )
    )
    manager.get_state.return_value = INITIAL_STATE
    manager.cancel.return_value = INITIAL_STATE
    return manager


@pytest.fixture
def api_client(mock_manager, monkeypatch):
    """TestClient with the generation manager replaced by a mock."""
    from fastapi.testclient import TestClient

    from storybox.api import main
    from storybox.api.dependencies import get_generation_manager

    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    main.app.dependency_overrides[get_generation_manager] = lambda: mock_manager

    with TestClient(main.app) as client:
        yield client, mock_manager

    main.app.dependency_overrides.clear()
