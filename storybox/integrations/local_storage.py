"""
Media storage on the local filesystem.

Images use the same object layout as the Firebase bucket
(``images/{owner}/{epoch_ms}_{random6}.png``); narration audio goes to
``audio/story_audio_{epoch_ms}_{random6}.mp3``. Files are written to a
temp file and renamed into place so readers never see a partial file.
"""

import asyncio
import logging
import random
import re
import shutil
import string
import tempfile
import time
from pathlib import Path
from typing import Optional

from storybox.core.errors import StorageError
from .firebase_storage import decode_base64, image_object_path

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("images", "audio")

OWNER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,128}$")


def _write_atomic(final_path: Path, data: bytes) -> None:
    """Save bytes atomically (temp file + rename)."""
    final_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        dir=final_path.parent,
        suffix=final_path.suffix,
        delete=False,
    ) as tmp:
        tmp.write(data)
        tmp.flush()
        temp_path = Path(tmp.name)

    shutil.move(str(temp_path), str(final_path))


class _LocalMediaStore:
    """Shared path and URL handling for the local stores."""

    def __init__(self, root: Path, base_url: Optional[str] = None):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/") if base_url else None

    def url_for(self, relative_path: str) -> str:
        if self.base_url:
            return f"{self.base_url}/media/{relative_path}"
        return (self.root / relative_path).resolve().as_uri()

    async def _save(self, relative_path: str, data: bytes) -> str:
        final_path = self.root / relative_path
        try:
            await asyncio.to_thread(_write_atomic, final_path, data)
        except OSError as e:
            raise StorageError(f"Could not write {relative_path}: {e}") from e

        logger.info(f"Saved {len(data)} bytes to {final_path}")
        return self.url_for(relative_path)


class LocalBlobStore(_LocalMediaStore):
    """BlobUploader that keeps images under a local media directory."""

    async def upload(self, base64_payload: str, owner_id: str) -> str:
        if not OWNER_ID_PATTERN.match(owner_id or ""):
            raise StorageError(f"Invalid owner id: {owner_id!r}")
        data = decode_base64(base64_payload)
        return await self._save(image_object_path(owner_id), data)


class LocalAudioStore(_LocalMediaStore):
    """AudioStore that writes narration clips under a local media directory."""

    async def persist(self, base64_payload: str) -> str:
        data = decode_base64(base64_payload)
        timestamp = int(time.time() * 1000)
        random_id = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
        return await self._save(f"audio/story_audio_{timestamp}_{random_id}.mp3", data)


def resolve_media_path(root: Path, kind: str, relative_path: str) -> Optional[Path]:
    """
    Resolve a stored media file for serving.

    Returns:
        The file path, or None if the kind is unknown, the path escapes
        the media directory, or no such file exists
    """
    if kind not in MEDIA_KINDS:
        return None

    base = (Path(root) / kind).resolve()
    candidate = (base / relative_path).resolve()
    if not candidate.is_relative_to(base) or not candidate.is_file():
        return None
    return candidate
