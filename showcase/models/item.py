"""
Showcase Backend — Item SQLAlchemy Model
==========================================

What:  ORM model representing the `items` table.
Why:   Each item is an image (optionally titled) shown in the catalog or,
       when flagged, in the slider carousel.

Table Design:
    - image: stored reference returned by the file store (e.g. items/<hash>.png).
      The item exclusively owns that file; replacing or deleting the item
      removes it from storage too.
    - title: optional caption
    - is_slider_item: True for carousel items, False for plain catalog items
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from showcase.database import Base
from showcase.models.user import utcnow


class Item(Base):
    """A catalog entry backed by one stored image file."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    image: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Stored reference of the item's image, relative to the storage root",
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default=None)

    is_slider_item: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Shown in the rotating banner when true",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return (
            f"<Item(id={self.id}, image='{self.image}', "
            f"is_slider_item={self.is_slider_item})>"
        )
