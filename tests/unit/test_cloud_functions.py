"""Unit tests for the callable functions client."""

import json

import httpx
import pytest

from storybox.core.errors import REMOTE_ERROR_MESSAGES, RemoteError
from storybox.integrations.cloud_functions import CloudFunctionsClient, normalize_status

BASE_URL = "https://europe-west1-demo.cloudfunctions.net"


def _client(handler) -> CloudFunctionsClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudFunctionsClient(BASE_URL, id_token="id-token", http_client=http_client)


class TestCallableProtocol:
    """Requests and successful responses."""

    @pytest.mark.asyncio
    async def test_generate_text_request_and_result(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"result": {"success": True, "story": "Once.", "promptTokens": 4, "totalTokens": 40}},
            )

        async with _client(handler) as client:
            result = await client.generate_text("A bear story")

        assert seen["url"] == f"{BASE_URL}/generateStory"
        assert seen["auth"] == "Bearer id-token"
        assert seen["body"] == {"data": {"prompt": "A bear story"}}
        assert result.story == "Once."
        assert result.total_tokens == 40

    @pytest.mark.asyncio
    async def test_generate_image_soft_failure_is_not_an_exception(self):
        def handler(request):
            return httpx.Response(200, json={"result": {"success": True, "imageBase64": "", "mimeType": "image/png"}})

        async with _client(handler) as client:
            result = await client.generate_image("a bear")

        assert result.success is True
        assert result.has_image is False

    @pytest.mark.asyncio
    async def test_generate_speech_sends_voice_settings(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["data"] = json.loads(request.content)["data"]
            return httpx.Response(200, json={"result": {"success": True, "audioBase64": "YQ==", "mimeType": "audio/mpeg"}})

        async with _client(handler) as client:
            result = await client.generate_speech("Hello", "coral", "gpt-4o-mini-tts", "Be gentle")

        assert seen["path"] == "/generateSpeech"
        assert seen["data"] == {"text": "Hello", "voice": "coral", "model": "gpt-4o-mini-tts", "instructions": "Be gentle"}
        assert result.has_audio

    @pytest.mark.asyncio
    async def test_generate_speech_omits_missing_instructions(self):
        seen = {}

        def handler(request):
            seen["data"] = json.loads(request.content)["data"]
            return httpx.Response(200, json={"result": {"success": True, "audioBase64": "YQ=="}})

        async with _client(handler) as client:
            await client.generate_speech("Hello", "coral", "gpt-4o-mini-tts")

        assert "instructions" not in seen["data"]

    @pytest.mark.asyncio
    async def test_decrement_credit(self):
        def handler(request):
            assert request.url.path == "/decrementCredit"
            assert json.loads(request.content) == {"data": {}}
            return httpx.Response(200, json={"result": {"success": True, "remainingUses": 3}})

        async with _client(handler) as client:
            result = await client.decrement_credit()

        assert result.remaining_uses == 3

    @pytest.mark.asyncio
    async def test_no_token_sends_no_authorization(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"result": {"success": True, "remainingUses": 1}})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with CloudFunctionsClient(BASE_URL, http_client=http_client) as client:
            await client.decrement_credit()

        assert seen["auth"] is None


class TestErrorMapping:
    """Error responses become RemoteError with a normalized code."""

    @pytest.mark.asyncio
    async def test_resource_exhausted(self):
        def handler(request):
            return httpx.Response(
                429,
                json={"error": {"status": "RESOURCE_EXHAUSTED", "message": "No credits left"}},
            )

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_text("story")

        assert exc_info.value.code == "resource-exhausted"
        assert exc_info.value.user_message == REMOTE_ERROR_MESSAGES["resource-exhausted"]

    @pytest.mark.asyncio
    async def test_invalid_argument_message(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"status": "INVALID_ARGUMENT", "message": "prompt is required"}})

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_text("")

        assert exc_info.value.code == "invalid-argument"
        assert exc_info.value.user_message == "Invalid parameter: prompt is required"

    @pytest.mark.asyncio
    async def test_http_status_fallback(self):
        def handler(request):
            return httpx.Response(401, text="Unauthorized")

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_image("a bear")

        assert exc_info.value.code == "unauthenticated"

    @pytest.mark.asyncio
    async def test_unknown_error_uses_per_call_default(self):
        def handler(request):
            return httpx.Response(500, json={"error": {"status": "INTERNAL"}})

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_image("a bear")

        assert exc_info.value.code == "internal"
        assert exc_info.value.user_message == "The image could not be created."

    @pytest.mark.asyncio
    async def test_missing_result_is_internal_error(self):
        def handler(request):
            return httpx.Response(200, json={"data": {}})

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.decrement_credit()

        assert exc_info.value.code == "internal"

    @pytest.mark.asyncio
    async def test_timeout_is_deadline_exceeded(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_image("a bear")

        assert exc_info.value.code == "deadline-exceeded"

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.generate_text("story")

        assert exc_info.value.code == "unavailable"
        assert exc_info.value.user_message == "The story could not be created."

    def test_normalize_status(self):
        assert normalize_status("RESOURCE_EXHAUSTED") == "resource-exhausted"
        assert normalize_status("not_found") == "not-found"
