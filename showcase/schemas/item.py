"""
Showcase Backend — Item Schemas
=================================

What:  Pydantic models defining the item API contract.
How:   `ItemResponse` is the JSON shape for every item endpoint;
       `ItemUpdate` records which optional fields an update actually sent.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ItemFilter(str, Enum):
    """Values accepted by GET /items?type=..."""
    SLIDER = "slider"
    NOT_SLIDER = "not_slider"
    ALL = "all"


class ItemResponse(BaseModel):
    """
    JSON shape: {id, image, title, is_slider_item}.

    `image` is the stored reference (e.g. "items/<hash>.png"); the file
    itself is served from GET /files/{image}.
    """
    id: int = Field(description="Item identifier")
    image: str = Field(description="Stored reference of the item's image")
    title: Optional[str] = Field(default=None, description="Optional caption")
    is_slider_item: bool = Field(description="Whether the item belongs to the slider")

    model_config = {"from_attributes": True}


class ItemUpdate(BaseModel):
    """
    Optional field changes for an item update.

    Only fields present in the request are applied; use
    `model_dump(exclude_unset=True)` to read them.
    """
    title: Optional[str] = None
    is_slider_item: Optional[bool] = None
