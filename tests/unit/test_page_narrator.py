"""Unit tests for PageNarrator."""

from unittest.mock import AsyncMock

import pytest

from storybox.config.speech import TTS_CONFIG
from storybox.core.cancellation import CancellationToken
from storybox.core.errors import GenerationCancelled, RemoteError, StorageError
from storybox.core.modules.page_narrator import PageNarrator
from storybox.core.types import Page, SpeechResult


@pytest.fixture
def page():
    return Page(page_number=2, content="The bear fell asleep.", image_prompt="")


@pytest.fixture
def client():
    client = AsyncMock()
    client.generate_speech.return_value = SpeechResult(success=True, audio_base64="YXVkaW8=")
    return client


@pytest.fixture
def audio_store():
    store = AsyncMock()
    store.persist.return_value = "file:///media/audio/story_audio_1.mp3"
    return store


@pytest.fixture
def narrator(client, audio_store):
    return PageNarrator(client, audio_store)


class TestNarratePage:
    """Tests for PageNarrator.narrate_page."""

    @pytest.mark.asyncio
    async def test_success_returns_stored_reference(self, narrator, page, client, audio_store):
        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference == "file:///media/audio/story_audio_1.mp3"
        client.generate_speech.assert_called_once_with(
            "The bear fell asleep.",
            TTS_CONFIG["voice"],
            TTS_CONFIG["model"],
            TTS_CONFIG["instructions"],
        )
        audio_store.persist.assert_called_once_with("YXVkaW8=")

    @pytest.mark.asyncio
    async def test_empty_payload_returns_none_without_retry(self, narrator, page, client, audio_store):
        client.generate_speech.return_value = SpeechResult(success=True, audio_base64="")

        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference is None
        assert client.generate_speech.call_count == 1
        audio_store.persist.assert_not_called()

    @pytest.mark.asyncio
    async def test_remote_error_returns_none_without_retry(self, narrator, page, client):
        client.generate_speech.side_effect = RemoteError("internal", "tts down")

        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference is None
        assert client.generate_speech.call_count == 1

    @pytest.mark.asyncio
    async def test_persist_failure_returns_none(self, narrator, page, audio_store):
        audio_store.persist.side_effect = StorageError("disk full")

        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference is None

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_none_without_retry(self, narrator, page, client, audio_store):
        client.generate_speech.side_effect = KeyError("audioBase64")

        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference is None
        assert client.generate_speech.call_count == 1
        audio_store.persist.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_persist_error_returns_none(self, narrator, page, audio_store):
        audio_store.persist.side_effect = ValueError("bad payload")

        reference = await narrator.narrate_page(page, CancellationToken())

        assert reference is None

    @pytest.mark.asyncio
    async def test_long_text_is_truncated(self, client, audio_store):
        narrator = PageNarrator(client, audio_store, max_text_length=10)
        page = Page(page_number=1, content="0123456789abcdef", image_prompt="")

        await narrator.narrate_page(page, CancellationToken())

        assert client.generate_speech.call_args.args[0] == "0123456789"

    @pytest.mark.asyncio
    async def test_cancelled_token_makes_no_call(self, narrator, page, client):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(GenerationCancelled):
            await narrator.narrate_page(page, token)

        client.generate_speech.assert_not_called()

    @pytest.mark.asyncio
    async def test_result_after_cancel_is_not_persisted(self, narrator, page, client, audio_store):
        token = CancellationToken()

        async def speak_then_cancel(*args):
            token.cancel()
            return SpeechResult(success=True, audio_base64="YXVkaW8=")

        client.generate_speech.side_effect = speak_then_cancel

        with pytest.raises(GenerationCancelled):
            await narrator.narrate_page(page, token)

        audio_store.persist.assert_not_called()
