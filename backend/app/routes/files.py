"""
ScanPlant Backend — Stored File Route
=======================================

What:  GET /files/{name} serves plant photos written by StorageService.
       This is the URL prefix StorageService puts in every image reference.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.exceptions import NotFoundError
from app.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


@router.get(
    "/files/{name}",
    summary="Serve a stored plant photo",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_file(name: str) -> FileResponse:
    # path_for rejects names that resolve outside the storage root
    path = storage_service.path_for(name)
    if not path.is_file():
        raise NotFoundError(resource="file", resource_id=name)

    return FileResponse(
        path=str(path),
        media_type=MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
