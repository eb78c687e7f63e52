"""Create users and personal_access_tokens tables

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Credential store and bearer token tables.
How:   Tokens reference users with ON DELETE CASCADE, so removing a user
       revokes every token they hold.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Login identifier, unique and lower-cased",
        ),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="passlib hash of the user's password",
        ),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'user'"),
            comment="Role name checked by the role gate",
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
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "personal_access_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False, server_default=sa.text("'api'")),
        sa.Column(
            "token",
            sa.String(64),
            nullable=False,
            comment="SHA-256 digest of the token secret",
        ),
        sa.Column("abilities", sa.JSON(), nullable=False),
        sa.Column("last_used_at", sa.TIMESTAMP(timezone=True), nullable=True),
        # NULL: never expires
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_personal_access_tokens"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_personal_access_tokens_user_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("token", name="uq_personal_access_tokens_token"),
    )
    op.create_index(
        "ix_personal_access_tokens_user_id",
        "personal_access_tokens",
        ["user_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_personal_access_tokens_user_id", table_name="personal_access_tokens")
    op.drop_table("personal_access_tokens")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
