"""
Showcase Backend — Token Issuer
=================================

What:  Creates, resolves and revokes opaque bearer tokens.
How:   The client receives "<token id>|<secret>". The table keeps only the
       SHA-256 digest of the secret, so a leaked database cannot be replayed.
       Resolution looks the row up by id and compares digests in constant time.
Who:   auth_service issues/revokes at login/logout; the role gate resolves
       on every protected request.

Expiry Policy:
    settings.token_ttl_minutes (None = never). Expired tokens resolve to
    None exactly like unknown ones; they are not deleted eagerly.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.config import settings
from showcase.models.token import PersonalAccessToken
from showcase.models.user import User
from showcase.security import digest_token, digests_match, generate_token_secret

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TokenService:
    """Issues and checks personal access tokens."""

    def __init__(self, ttl_minutes: Optional[int] = None):
        self._ttl_override = ttl_minutes

    @property
    def ttl_minutes(self) -> Optional[int]:
        if self._ttl_override is not None:
            return self._ttl_override
        return settings.token_ttl_minutes

    async def issue(
        self,
        db: AsyncSession,
        user: User,
        name: str = "api",
        abilities: Iterable[str] = (),
    ) -> Tuple[PersonalAccessToken, str]:
        """
        Create a token for `user`.

        Returns:
            (token row, plain-text token). The plain text cannot be recovered later.
        """
        secret = generate_token_secret()
        now = datetime.now(timezone.utc)
        expires_at = None
        if self.ttl_minutes:
            expires_at = now + timedelta(minutes=self.ttl_minutes)

        token = PersonalAccessToken(
            user_id=user.id,
            name=name,
            token=digest_token(secret),
            abilities=list(abilities),
            created_at=now,
            expires_at=expires_at,
        )
        db.add(token)
        await db.flush()  # assigns token.id for the plain-text prefix

        logger.info("Issued token %s for user %s", token.id, user.id)
        return token, f"{token.id}|{secret}"

    async def _find(self, db: AsyncSession, plain_text: str) -> Optional[PersonalAccessToken]:
        token_id, sep, secret = plain_text.partition("|")
        if not sep:
            # Bare secret without id prefix: look up by digest
            result = await db.execute(
                select(PersonalAccessToken).where(
                    PersonalAccessToken.token == digest_token(plain_text)
                )
            )
            return result.scalar_one_or_none()

        if not token_id.isdigit() or not secret:
            return None
        token = await db.get(PersonalAccessToken, int(token_id))
        if token is None or not digests_match(token.token, digest_token(secret)):
            return None
        return token

    async def resolve(
        self, db: AsyncSession, plain_text: Optional[str]
    ) -> Optional[Tuple[User, PersonalAccessToken]]:
        """
        Map a presented token to its live owner.

        Returns:
            (user, token row), or None when the token is missing, unknown,
            expired, or its user no longer exists.
        """
        if not plain_text:
            return None

        token = await self._find(db, plain_text)
        if token is None:
            return None

        now = datetime.now(timezone.utc)
        if token.expires_at is not None and _as_utc(token.expires_at) <= now:
            logger.debug("Token %s expired at %s", token.id, token.expires_at)
            return None

        user = await db.get(User, token.user_id)
        if user is None:
            return None

        token.last_used_at = now
        await db.flush()
        return user, token

    async def revoke(self, db: AsyncSession, token_id: int) -> None:
        """Delete one token. Deleting a token that is already gone is a no-op."""
        await db.execute(delete(PersonalAccessToken).where(PersonalAccessToken.id == token_id))
        await db.flush()
        logger.info("Revoked token %s", token_id)

    async def revoke_all(self, db: AsyncSession, user: User) -> None:
        await db.execute(delete(PersonalAccessToken).where(PersonalAccessToken.user_id == user.id))
        await db.flush()
        logger.info("Revoked all tokens for user %s", user.id)


token_service = TokenService()
