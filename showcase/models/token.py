"""
Showcase Backend — Personal Access Token Model
================================================

What:  ORM model for the `personal_access_tokens` table.
Why:   Bearer tokens are opaque and checked against this table on every
       protected request; deleting the row revokes the token.
How:   Only the SHA-256 digest of the secret is stored. The plain text
       (`<id>|<secret>`) is shown to the client once, at login.

Lifecycle:
    1. Created on successful login (abilities always empty)
    2. `last_used_at` touched each time the role gate resolves it
    3. Deleted on logout, on password change, or ignored once `expires_at` passes
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from showcase.database import Base
from showcase.models.user import utcnow


class PersonalAccessToken(Base):
    """A revocable bearer credential owned by exactly one user."""

    __tablename__ = "personal_access_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, default="api")

    # SHA-256 hex digest of the secret half of the plain-text token
    token: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 digest of the token secret",
    )

    abilities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    # NULL means the token never expires (see settings.token_ttl_minutes)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<PersonalAccessToken(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
