"""
Showcase Backend — Credential Store
=====================================

What:  Lookup and out-of-band management of user accounts.
Why:   Accounts are never created over HTTP; this module is what the CLI
       and the startup bootstrap use to seed them.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.config import MIN_PASSWORD_LENGTH, settings
from showcase.exceptions import ValidationError
from showcase.models.user import User
from showcase.security import hash_password
from showcase.services.token_service import token_service

logger = logging.getLogger(__name__)

ROLES = ("admin", "user")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    normalized = normalize_email(email)
    if not normalized:
        return None
    result = await db.execute(select(User).where(User.email == normalized))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    role: str = "user",
) -> User:
    """
    Create an account.

    Raises:
        ValidationError: blank email, short password, unknown role or duplicate email.
    """
    normalized = normalize_email(email)
    if not normalized:
        raise ValidationError(message="The email field is required.", field="email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            message=f"The password must be at least {MIN_PASSWORD_LENGTH} characters.",
            field="password",
        )
    if role not in ROLES:
        raise ValidationError(message=f"The selected role '{role}' is invalid.", field="role")
    if await get_user_by_email(db, normalized) is not None:
        raise ValidationError(message="The email has already been taken.", field="email")

    user = User(email=normalized, password_hash=hash_password(password), role=role)
    db.add(user)
    await db.flush()
    logger.info("Created user %s with role %s", user.id, role)
    return user


async def set_password(db: AsyncSession, user: User, password: str) -> None:
    """Replace a user's password and revoke every token they hold."""
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            message=f"The password must be at least {MIN_PASSWORD_LENGTH} characters.",
            field="password",
        )
    user.password_hash = hash_password(password)
    await db.flush()
    await token_service.revoke_all(db, user)


async def bootstrap_admin_if_needed(db: AsyncSession) -> Optional[User]:
    """
    Create the first admin when the users table is empty.

    Controlled by BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD; does
    nothing when either is unset or any user already exists.
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return None

    count = (await db.execute(select(func.count(User.id)))).scalar() or 0
    if count > 0:
        return None

    role = settings.admin_roles_list[0] if settings.admin_roles_list else "admin"
    user = User(
        email=normalize_email(settings.bootstrap_admin_email),
        password_hash=hash_password(settings.bootstrap_admin_password),
        role=role,
    )
    db.add(user)
    await db.flush()
    logger.info("Bootstrapped admin user %s", user.email)
    return user
