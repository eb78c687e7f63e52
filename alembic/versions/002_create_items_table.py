"""Create items table

Revision ID: 002
Revises: 001
Create Date: 2025-01-15 00:05:00.000000+00:00

What:  Catalog items, each owning one stored image.
How:   `image` holds the file store ref (items/<hash>.<ext>); the file itself
       lives under STORAGE_ROOT, not in the database.

Rollback: downgrade() drops the table. Stored files are left on disk.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "image",
            sa.String(255),
            nullable=False,
            comment="Stored reference of the item's image, relative to the storage root",
        ),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column(
            "is_slider_item",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Shown in the rotating banner when true",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_items"),
    )
    # GET /items?type=slider filters on this column
    op.create_index("ix_items_is_slider_item", "items", ["is_slider_item"])


def downgrade() -> None:
    op.drop_index("ix_items_is_slider_item", table_name="items")
    op.drop_table("items")
