"""
Remote service configuration for the story pipeline.

Text, image and speech generation run as Firebase callable functions;
images are stored in Firebase Storage and narration audio on local disk.
Setting STORYBOX_MOCK=1 swaps the remote service for an offline stand-in.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PROJECT_DIR = Path(__file__).parent.parent.parent

FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_FUNCTIONS_REGION = os.getenv("FIREBASE_FUNCTIONS_REGION", "europe-west1")
FUNCTIONS_BASE_URL = os.getenv("FUNCTIONS_BASE_URL", "").rstrip("/")
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", "")

# Timeout for each remote call (seconds)
CALL_TIMEOUT = float(os.getenv("GENERATION_CALL_TIMEOUT", "120"))

MOCK_MODE = os.getenv("STORYBOX_MOCK", "").lower() in ("1", "true", "yes")

# Local media storage (images when no bucket is configured, narration audio always)
MEDIA_DIR = Path(os.getenv("MEDIA_DIR", str(PROJECT_DIR / "data" / "media")))
MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "").rstrip("/")


def get_functions_base_url() -> str:
    """
    Get the base URL of the callable functions.

    Uses FUNCTIONS_BASE_URL if set, otherwise builds the default
    https://<region>-<project>.cloudfunctions.net URL.
    """
    if FUNCTIONS_BASE_URL:
        return FUNCTIONS_BASE_URL
    if not FIREBASE_PROJECT_ID:
        raise ValueError(
            "FIREBASE_PROJECT_ID not found in environment. Set it (or FUNCTIONS_BASE_URL) in .env file."
        )
    return f"https://{FIREBASE_FUNCTIONS_REGION}-{FIREBASE_PROJECT_ID}.cloudfunctions.net"


def get_generation_client(id_token: Optional[str] = None, http_client=None):
    """Get the generation client for a signed-in user.

    Args:
        id_token: Firebase ID token forwarded to the callables
        http_client: Optional shared httpx.AsyncClient
    """
    if MOCK_MODE:
        from storybox.integrations.mock_functions import MockGenerationClient

        return MockGenerationClient()

    from storybox.integrations.cloud_functions import CloudFunctionsClient

    return CloudFunctionsClient(
        get_functions_base_url(),
        id_token=id_token,
        timeout=CALL_TIMEOUT,
        http_client=http_client,
    )


def get_blob_uploader(id_token: Optional[str] = None, http_client=None):
    """
    Get the image uploader.

    Uploads to Firebase Storage when FIREBASE_STORAGE_BUCKET is set,
    otherwise stores images under MEDIA_DIR.
    """
    if FIREBASE_STORAGE_BUCKET and not MOCK_MODE:
        from storybox.integrations.firebase_storage import FirebaseStorageUploader

        return FirebaseStorageUploader(
            FIREBASE_STORAGE_BUCKET,
            id_token=id_token,
            timeout=CALL_TIMEOUT,
            http_client=http_client,
        )

    from storybox.integrations.local_storage import LocalBlobStore

    return LocalBlobStore(MEDIA_DIR, base_url=MEDIA_BASE_URL or None)


def get_audio_store():
    """Get the narration audio store."""
    from storybox.integrations.local_storage import LocalAudioStore

    return LocalAudioStore(MEDIA_DIR, base_url=MEDIA_BASE_URL or None)
