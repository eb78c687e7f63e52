"""
Showcase Backend — Stored File Route
======================================

What:  Serves stored item images by the ref recorded on the item
       (GET /files/items/<hash>.png).
How:   FileService maps the ref to a path inside storage_root; refs that
       escape the root or point at nothing answer 404.
"""

import logging
import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from showcase.exceptions import InvalidUploadError, NotFoundError
from showcase.schemas.common import ErrorResponse
from showcase.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])


@router.get(
    "/files/{ref:path}",
    response_class=FileResponse,
    responses={404: {"description": "No stored file under this ref", "model": ErrorResponse}},
    summary="Download a stored image",
)
async def get_file(ref: str) -> FileResponse:
    try:
        path = file_service.resolve_path(ref)
    except InvalidUploadError:
        logger.warning("Rejected file ref outside storage root: %s", ref)
        raise NotFoundError(resource="file", resource_id=ref)

    if not await file_service.exists(ref):
        raise NotFoundError(resource="file", resource_id=ref)

    media_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(path, media_type=media_type or "application/octet-stream")
