"""
Upload generated images to Firebase Storage.

Uses the Storage REST API with the signed-in user's ID token, so the
bucket's security rules apply exactly as they do for the mobile app.
"""

import base64
import binascii
import logging
import random
import string
import time
from typing import Optional
from urllib.parse import quote

import httpx

from storybox.core.errors import StorageError

logger = logging.getLogger(__name__)

STORAGE_API_URL = "https://firebasestorage.googleapis.com/v0/b"


def decode_base64(payload: str) -> bytes:
    """
    Decode a base64 payload, tolerating a ``data:<mime>;base64,`` prefix.

    Raises:
        StorageError: If the payload is empty or not valid base64
    """
    if payload and payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    if not payload:
        raise StorageError("Empty media payload")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StorageError(f"Invalid base64 payload: {e}") from e


def image_object_path(owner_id: str) -> str:
    """images/{owner}/{epoch_ms}_{random6}.png"""
    timestamp = int(time.time() * 1000)
    random_id = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"images/{owner_id}/{timestamp}_{random_id}.png"


class FirebaseStorageUploader:
    """
    BlobUploader for a Firebase Storage bucket.

    Args:
        bucket: Bucket name, e.g. "<project>.appspot.com"
        id_token: Firebase ID token of the signed-in user
        timeout: Per-request timeout in seconds
        http_client: Optional pre-built httpx.AsyncClient
    """

    def __init__(
        self,
        bucket: str,
        id_token: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.bucket = bucket
        self.id_token = id_token
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def upload(self, base64_payload: str, owner_id: str) -> str:
        """
        Upload a PNG image and return its download URL.

        Raises:
            StorageError: If the payload is invalid or the upload fails
        """
        data = decode_base64(base64_payload)
        path = image_object_path(owner_id)

        headers = {"Content-Type": "image/png"}
        if self.id_token:
            headers["Authorization"] = f"Firebase {self.id_token}"

        try:
            response = await self._client.post(
                f"{STORAGE_API_URL}/{self.bucket}/o",
                params={"name": path, "uploadType": "media"},
                content=data,
                headers=headers,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise StorageError(f"Upload of {path} failed: {type(e).__name__}") from e

        if response.status_code >= 400:
            raise StorageError(f"Upload of {path} failed with HTTP {response.status_code}")

        try:
            metadata = response.json()
        except ValueError:
            metadata = {}
        if not isinstance(metadata, dict):
            metadata = {}
        download_token = (metadata.get("downloadTokens") or "").split(",")[0]
        url = f"{STORAGE_API_URL}/{self.bucket}/o/{quote(path, safe='')}?alt=media"
        if download_token:
            url += f"&token={download_token}"

        logger.info(f"Uploaded {len(data)} bytes to {path}")
        return url

    async def aclose(self) -> None:
        await self._client.aclose()
