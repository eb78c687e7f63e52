"""
Showcase Backend — Auth Service
=================================

What:  Verifies credentials and issues or revokes bearer tokens.
Who:   Called by POST /login and POST /logout.

Login Flow:
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  email   │───▶│ user lookup  │───▶│ hash verify  │───▶│  issue   │
    │ password │    │ (by email)   │    │ (passlib)    │    │  token   │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    Unknown email and wrong password both end in the same
    InvalidCredentialsError, after the same amount of hashing work.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from showcase.exceptions import InvalidCredentialsError
from showcase.models.token import PersonalAccessToken
from showcase.schemas.user import LoginResponse, UserPublic
from showcase.security import burn_password_check, verify_password
from showcase.services.token_service import TokenService, token_service
from showcase.services.user_service import get_user_by_email

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless login/logout orchestration."""

    def __init__(self, tokens: TokenService = token_service):
        self.tokens = tokens

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        remember: bool = False,
    ) -> LoginResponse:
        """
        Exchange credentials for a new bearer token.

        Returns:
            LoginResponse with the public user view and the plain-text token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password (indistinguishable)
        """
        user = await get_user_by_email(db, email)

        if user is None:
            burn_password_check(password)
            logger.warning("Login failed")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.warning("Login failed")
            raise InvalidCredentialsError()

        _, plain_text = await self.tokens.issue(db, user, name="api", abilities=())
        logger.info("User %s logged in (remember=%s)", user.id, bool(remember))

        return LoginResponse(
            user=UserPublic.model_validate(user),
            token=plain_text,
        )

    async def logout(self, db: AsyncSession, current_token: PersonalAccessToken) -> None:
        """Revoke only the token used for this request. Idempotent."""
        await self.tokens.revoke(db, current_token.id)
        logger.info("User %s logged out (token %s)", current_token.user_id, current_token.id)


auth_service = AuthService()
