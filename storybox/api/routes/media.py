"""Serve locally stored story images and narration."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from storybox.integrations.local_storage import resolve_media_path
from ..config import MEDIA_DIR

router = APIRouter()

MEDIA_TYPES = {
    "images": "image/png",
    "audio": "audio/mpeg",
}


@router.get(
    "/{kind}/{path:path}",
    summary="Get a media file",
    responses={
        200: {"content": {"image/png": {}, "audio/mpeg": {}}},
        404: {"description": "Media not found"},
    },
)
async def get_media(kind: str, path: str):
    """Get a stored image or audio clip."""
    media_path = resolve_media_path(MEDIA_DIR, kind, path)
    if media_path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Media not found",
        )

    return FileResponse(media_path, media_type=MEDIA_TYPES[kind])
