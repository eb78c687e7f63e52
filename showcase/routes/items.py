"""
Showcase Backend — Item Route Handlers
========================================

What:  /items CRUD endpoints.
How:   Listing and detail are public. Create, update and delete depend on
       `require_admin`, which resolves the bearer token and checks the role
       before the handler body runs.

Request Formats:
    POST /items           multipart: image (file), is_slider_item, title?
    PUT|POST /items/{id}  multipart: image (file, or the item's current ref),
                          is_slider_item?, title?   (_method=PUT is ignored)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from showcase.database import get_db_session
from showcase.exceptions import NotFoundError, ValidationError
from showcase.middleware.role_gate import require_admin
from showcase.models.user import User
from showcase.schemas.common import ErrorResponse
from showcase.schemas.item import ItemFilter, ItemResponse, ItemUpdate
from showcase.services.item_service import ImageInput, ImageUpload, item_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Items"])


def parse_item_filter(value: Optional[str]) -> ItemFilter:
    """Absent or empty → all; anything outside the enum is a validation error."""
    if not value:
        return ItemFilter.ALL
    try:
        return ItemFilter(value)
    except ValueError:
        raise ValidationError(
            message="The selected type is invalid.",
            field="type",
            context={"allowed": [f.value for f in ItemFilter]},
        )


def parse_item_id(value: str) -> int:
    """Ids that are not plain digits can name no item, so they answer 404 like unknown ones."""
    # 11+ digits always exceed the INTEGER primary key
    if len(value) > 10 or not value.isascii() or not value.isdigit():
        raise NotFoundError(resource="item", resource_id=value[:32])
    return int(value)


@router.get(
    "/items",
    response_model=List[ItemResponse],
    responses={422: {"description": "Invalid type filter", "model": ErrorResponse}},
    summary="List items",
)
async def list_items(
    item_type: Optional[str] = Query(
        default=None,
        alias="type",
        description="Filter: slider, not_slider or all (default all)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[ItemResponse]:
    return await item_service.list_items(db, parse_item_filter(item_type))


@router.post(
    "/items",
    status_code=201,
    response_model=ItemResponse,
    responses={
        400: {"description": "Invalid image upload", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Caller is not an admin", "model": ErrorResponse},
        422: {"description": "Missing or malformed fields", "model": ErrorResponse},
    },
    summary="Add a new item",
)
async def create_item(
    image: UploadFile = File(..., description="Item image (PNG, JPEG, GIF, BMP or WEBP)"),
    is_slider_item: bool = Form(..., description="1/true for slider items, 0/false otherwise"),
    title: Optional[str] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_admin),
) -> ItemResponse:
    try:
        content = await image.read()
        logger.info(
            "Create item by user %s: filename=%s, size=%d bytes",
            user.id,
            image.filename or "unknown",
            len(content),
        )
        return await item_service.create_item(
            db=db,
            image=ImageUpload(content=content, filename=image.filename),
            is_slider_item=is_slider_item,
            title=title or None,
        )
    finally:
        await image.close()


@router.get(
    "/items/{item_id}",
    response_model=ItemResponse,
    responses={404: {"description": "Item not found", "model": ErrorResponse}},
    summary="Retrieve a specific item",
)
async def get_item(
    item_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ItemResponse:
    return await item_service.get_item(db, parse_item_id(item_id))


async def _read_image_field(request: Request) -> ImageInput:
    form = await request.form()
    value = form.get("image")
    if isinstance(value, StarletteUploadFile):
        try:
            return ImageUpload(content=await value.read(), filename=value.filename)
        finally:
            await value.close()
    if isinstance(value, str) and value:
        return value
    raise ValidationError(message="The image field is required.", field="image")


@router.put(
    "/items/{item_id}",
    response_model=ItemResponse,
    responses={
        400: {"description": "Invalid image upload", "model": ErrorResponse},
        404: {"description": "Item not found", "model": ErrorResponse},
    },
    summary="Update a specific item",
)
@router.post(
    "/items/{item_id}",
    response_model=ItemResponse,
    responses={
        400: {"description": "Invalid image upload", "model": ErrorResponse},
        404: {"description": "Item not found", "model": ErrorResponse},
    },
    summary="Update a specific item (method override for form clients)",
)
async def update_item(
    item_id: str,
    request: Request,
    title: Optional[str] = Form(default=None),
    is_slider_item: Optional[bool] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_admin),
) -> ItemResponse:
    """
    Replace an item's image and/or fields.

    Sending the item's current `image` ref as a plain form value keeps the
    stored file. Fields missing from the form keep their current values.
    """
    item_pk = parse_item_id(item_id)
    image = await _read_image_field(request)

    form = await request.form()
    fields = {}
    if "title" in form:
        fields["title"] = title or None
    if is_slider_item is not None:
        fields["is_slider_item"] = is_slider_item

    logger.info("Update item %s by user %s (fields=%s)", item_id, user.id, sorted(fields))
    return await item_service.update_item(
        db=db,
        item_id=item_pk,
        image=image,
        changes=ItemUpdate(**fields),
    )


@router.delete(
    "/items/{item_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Item not found", "model": ErrorResponse}},
    summary="Delete a specific item",
)
async def delete_item(
    item_id: str,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_admin),
) -> Response:
    logger.info("Delete item %s by user %s", item_id, user.id)
    await item_service.delete_item(db, parse_item_id(item_id))
    return Response(status_code=204)
