"""
Showcase Backend — User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table (the credential store).
Why:   Login looks users up by email and checks the stored password hash;
       the role gate reads `role` to decide who may manage items.
Who:   Used by user_service, auth_service and the role gate.

Users are created out-of-band (`showcase-admin create-user` or the
bootstrap admin). Nothing in the HTTP surface mutates them.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from showcase.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    An account that can log in.

    The password hash never leaves the service layer: API responses are
    built from `UserPublic`, which has no hash field.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Stored normalized (stripped, lower-cased) so lookups are case-insensitive
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier, unique and lower-cased",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="passlib hash of the user's password",
    )

    # Enum-like string; "admin" passes the item management gate
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="user",
        server_default=text("'user'"),
        comment="Role name checked by the role gate",
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
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
