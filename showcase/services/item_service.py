"""
Showcase Backend — Item Service (Business Logic Orchestrator)
===============================================================

What:  Create, read, update and delete items, keeping each item's stored
       image in step with its row.
How:   Composes FileService (bytes on disk) with SQLAlchemy queries on the
       `items` table. The per-request session commits after the route returns.
Who:   Called by the /items route handlers.

Image Lifecycle:
    create:  validate → store file → insert row
             (row insert fails → stored file is cleaned up)
    update:  same ref as stored   → keep file, no storage calls
             new image bytes      → validate → delete old file → store new → swap ref
             anything else        → InvalidUploadError, item and file untouched
    delete:  delete file (absent is fine) → delete row

    File and row writes are not one transaction. A crash between them can
    leave an orphaned file (create/update) or, on delete, a row whose file
    is already gone.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.exceptions import DatabaseError, FileStorageError, InvalidUploadError, NotFoundError
from showcase.models.item import Item
from showcase.schemas.item import ItemFilter, ItemResponse, ItemUpdate
from showcase.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)

ITEM_CATEGORY = "item"
ITEM_SUBPATH = "items"

# Upper bound of the INTEGER primary key; larger ids cannot exist
MAX_ITEM_ID = 2**31 - 1


@dataclass(frozen=True)
class ImageUpload:
    """Raw bytes of an uploaded image plus the client's filename (informational only)."""
    content: bytes
    filename: Optional[str] = None


# An update's image is either a fresh upload or the ref already on the item
ImageInput = Union[ImageUpload, str]


class ItemService:
    """
    Business logic layer for item operations.

    Error Handling Strategy:
        Application exceptions (NotFoundError, InvalidUploadError,
        FileStorageError) propagate unchanged. Anything unexpected from the
        database is wrapped in DatabaseError.
    """

    def __init__(self, files: Optional[FileService] = None):
        self._files = files

    @property
    def files(self) -> FileService:
        return self._files or file_service

    # ── Repository helpers ────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, item_id: int) -> Item:
        if not 1 <= item_id <= MAX_ITEM_ID:
            raise NotFoundError(resource="item", resource_id=str(item_id))
        try:
            item = await db.get(Item, item_id)
        except Exception as e:
            logger.error("Database error fetching item %s: %s", item_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the item. Please try again.",
                context={"item_id": item_id, "error_type": type(e).__name__},
            )
        if item is None:
            raise NotFoundError(resource="item", resource_id=str(item_id))
        return item

    async def _store(self, image: ImageUpload) -> str:
        """Save an upload; a failed write is reported as an invalid upload."""
        try:
            return await self.files.save(
                image.content,
                category=ITEM_CATEGORY,
                subpath=ITEM_SUBPATH,
                filename=image.filename,
            )
        except FileStorageError as e:
            logger.error("Image write failed: %s | Context: %s", e.message, e.context)
            raise InvalidUploadError(
                message="Invalid image upload. The file could not be stored.",
                context=e.context,
            )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_items(
        self,
        db: AsyncSession,
        item_filter: ItemFilter = ItemFilter.ALL,
    ) -> List[ItemResponse]:
        """
        List items, optionally narrowed to slider or non-slider ones.

        Query plan:
            SELECT * FROM items [WHERE is_slider_item = :flag] ORDER BY id
        """
        query = select(Item)
        if item_filter == ItemFilter.SLIDER:
            query = query.where(Item.is_slider_item.is_(True))
        elif item_filter == ItemFilter.NOT_SLIDER:
            query = query.where(Item.is_slider_item.is_(False))
        query = query.order_by(Item.id)

        try:
            result = await db.execute(query)
            items = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing items: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve items. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [ItemResponse.model_validate(item) for item in items]

    async def get_item(self, db: AsyncSession, item_id: int) -> ItemResponse:
        """
        Raises:
            NotFoundError: no item with this id (→ 404)
        """
        return ItemResponse.model_validate(await self._load(db, item_id))

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_item(
        self,
        db: AsyncSession,
        image: ImageUpload,
        is_slider_item: bool,
        title: Optional[str] = None,
    ) -> ItemResponse:
        """
        Store the image, then insert the row that references it.

        Raises:
            InvalidUploadError: image missing, empty, too large, not an image,
                                or the write failed (no row is written)
            DatabaseError:      the row insert failed (stored file is removed)
        """
        if image is None:
            raise InvalidUploadError()

        ref = await self._store(image)

        try:
            item = Item(image=ref, title=title, is_slider_item=is_slider_item)
            db.add(item)
            await db.flush()
        except Exception as e:
            await self.files.cleanup_file(ref)
            logger.error("Failed to insert item for %s: %s", ref, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the item. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Item %s created (image=%s, slider=%s)", item.id, ref, is_slider_item)
        return ItemResponse.model_validate(item)

    async def update_item(
        self,
        db: AsyncSession,
        item_id: int,
        image: ImageInput,
        changes: Optional[ItemUpdate] = None,
    ) -> ItemResponse:
        """
        Update an item's image and/or fields.

        Args:
            image: the item's current ref (keep the file) or a new ImageUpload
            changes: optional title / is_slider_item; only fields that were
                     explicitly set are applied

        Raises:
            NotFoundError:      no item with this id
            InvalidUploadError: image is neither the current ref nor a valid
                                image; the item and its file are left as they were
        """
        item = await self._load(db, item_id)
        replaced = False

        if isinstance(image, str):
            if image != item.image:
                raise InvalidUploadError(context={"item_id": item_id, "reason": "unknown ref"})
        elif isinstance(image, ImageUpload):
            # Validate first so a bad payload never costs the current file
            self.files.validate(image.content, ITEM_CATEGORY)
            await self.files.delete(item.image)
            item.image = await self._store(image)
            replaced = True
        else:
            raise InvalidUploadError(context={"item_id": item_id, "reason": "missing image"})

        for field, value in (changes.model_dump(exclude_unset=True) if changes else {}).items():
            if field == "is_slider_item" and value is None:
                continue
            setattr(item, field, value)

        try:
            await db.flush()
        except Exception as e:
            logger.error("Failed to update item %s: %s", item_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the item. Please try again.",
                context={"item_id": item_id, "error_type": type(e).__name__},
            )

        logger.info("Item %s updated (image replaced=%s)", item.id, replaced)
        return ItemResponse.model_validate(item)

    async def delete_item(self, db: AsyncSession, item_id: int) -> None:
        """
        Remove the stored file, then the row.

        If the file removal fails the row is kept, so the call can be retried.

        Raises:
            NotFoundError:    no item with this id
            FileStorageError: the file exists but could not be removed
        """
        item = await self._load(db, item_id)
        await self.files.delete(item.image)

        try:
            await db.delete(item)
            await db.flush()
        except Exception as e:
            logger.error(
                "Item %s row delete failed after its file %s was removed: %s",
                item_id,
                item.image,
                str(e),
                exc_info=True,
            )
            raise DatabaseError(
                message="Could not delete the item. Please try again.",
                context={"item_id": item_id, "error_type": type(e).__name__},
            )

        logger.info("Item %s deleted", item_id)


# ── Singleton Instance ────────────────────────────────────────────────────
item_service = ItemService()
