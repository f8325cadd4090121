"""
Client for the story generation callable functions.

Speaks the Firebase callable protocol over HTTPS: every function is a POST
to ``{base_url}/{name}`` with a ``{"data": ...}`` body and the user's ID token
as a bearer token. A successful call answers ``{"result": ...}``; a failed one
answers ``{"error": {"status": "RESOURCE_EXHAUSTED", "message": ...}}``.
"""

import logging
from typing import Optional

import httpx

from storybox.core.errors import RemoteError
from storybox.core.types import CreditResult, ImageResult, SpeechResult, TextResult

logger = logging.getLogger(__name__)

# Fallback message per callable when the service gives none
DEFAULT_MESSAGES = {
    "generateStory": "The story could not be created.",
    "generateImage": "The image could not be created.",
    "generateSpeech": "The audio could not be created.",
    "decrementCredit": "The credit could not be updated.",
}

# Used when an error body carries no status
HTTP_STATUS_CODES = {
    400: "invalid-argument",
    401: "unauthenticated",
    403: "permission-denied",
    404: "not-found",
    429: "resource-exhausted",
    503: "unavailable",
    504: "deadline-exceeded",
}


def normalize_status(status: str) -> str:
    """RESOURCE_EXHAUSTED -> resource-exhausted"""
    return status.strip().lower().replace("_", "-")


class CloudFunctionsClient:
    """
    GenerationClient backed by Firebase callable functions.

    Args:
        base_url: Functions base URL, e.g. https://europe-west1-<project>.cloudfunctions.net
        id_token: Firebase ID token of the signed-in user
        timeout: Per-request timeout in seconds
        http_client: Optional pre-built httpx.AsyncClient (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        id_token: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.id_token = id_token
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def generate_text(self, prompt: str) -> TextResult:
        payload = await self._call("generateStory", {"prompt": prompt})
        return TextResult.from_payload(payload)

    async def generate_image(self, prompt: str) -> ImageResult:
        payload = await self._call("generateImage", {"prompt": prompt})
        return ImageResult.from_payload(payload)

    async def generate_speech(
        self,
        text: str,
        voice: str,
        model: str,
        instructions: Optional[str] = None,
    ) -> SpeechResult:
        data = {"text": text, "voice": voice, "model": model}
        if instructions:
            data["instructions"] = instructions
        payload = await self._call("generateSpeech", data)
        return SpeechResult.from_payload(payload)

    async def decrement_credit(self) -> CreditResult:
        payload = await self._call("decrementCredit", {})
        return CreditResult.from_payload(payload)

    async def _call(self, name: str, data: dict) -> dict:
        """
        Invoke a callable and return its result payload.

        Raises:
            RemoteError: On an error response, a transport failure or a timeout
        """
        default_message = DEFAULT_MESSAGES.get(name)
        headers = {"Content-Type": "application/json"}
        if self.id_token:
            headers["Authorization"] = f"Bearer {self.id_token}"

        try:
            response = await self._client.post(
                f"{self.base_url}/{name}",
                json={"data": data},
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise RemoteError("deadline-exceeded", str(e), default_message) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"{name} request failed: {type(e).__name__}: {e}")
            raise RemoteError("unavailable", "", default_message) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        error = body.get("error")
        if response.status_code >= 400 or error:
            raise self._to_remote_error(name, response.status_code, error, default_message)

        result = body.get("result")
        if not isinstance(result, dict):
            raise RemoteError("internal", "Response did not contain a result", default_message)
        return result

    @staticmethod
    def _to_remote_error(
        name: str,
        status_code: int,
        error,
        default_message: Optional[str],
    ) -> RemoteError:
        status = ""
        message = ""
        if isinstance(error, dict):
            status = error.get("status") or ""
            message = error.get("message") or ""

        code = normalize_status(status) if status else HTTP_STATUS_CODES.get(status_code, "internal")
        logger.warning(f"{name} failed with {code} (HTTP {status_code}): {message}")
        return RemoteError(code, message, default_message)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CloudFunctionsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
