"""
Showcase Backend — Role Gate
==============================

What:  Resolves the caller from their bearer token and checks role membership.
Why:   Item mutation is restricted to admins; listing and detail stay public.
How:   `authorize()` holds the rule and has no HTTP dependencies. `RoleGate`
       and `get_auth_context` wrap it as FastAPI dependencies, so routes
       receive the resolved user as a parameter instead of reading ambient
       request state.

Decision table:
    no token / unknown / expired token  → UnauthenticatedError (401)
    valid token, role not in required   → ForbiddenError       (403)
    valid token, role allowed           → AuthContext(user, token)

The gate has no side effects beyond the token's `last_used_at` touch.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.config import settings
from showcase.database import get_db_session
from showcase.exceptions import ForbiddenError, UnauthenticatedError
from showcase.models.token import PersonalAccessToken
from showcase.models.user import User
from showcase.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must become our 401 shape, not FastAPI's 403
_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The caller of the current request."""
    user: User
    token: PersonalAccessToken


async def authorize(
    db: AsyncSession,
    token: Optional[str],
    required_roles: Optional[Iterable[str]] = None,
    tokens: TokenService = token_service,
) -> AuthContext:
    """
    Resolve `token` to its user and check the user's role.

    Args:
        db: Async database session
        token: Plain-text bearer token, or None when the header was absent
        required_roles: Roles allowed through; None or empty means any
                        authenticated user

    Raises:
        UnauthenticatedError: token missing, unknown or expired
        ForbiddenError: role not in required_roles
    """
    resolved = await tokens.resolve(db, token)
    if resolved is None:
        logger.warning("Unauthenticated request (token %s)", "present" if token else "missing")
        raise UnauthenticatedError()

    user, row = resolved
    roles = frozenset(required_roles or ())
    if roles and user.role not in roles:
        logger.warning("Forbidden: user %s with role '%s' needs one of %s", user.id, user.role, sorted(roles))
        raise ForbiddenError(context={"user_id": user.id, "role": user.role})

    return AuthContext(user=user, token=row)


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    """Dependency: any authenticated caller."""
    return await authorize(db, _bearer_token(credentials))


class RoleGate:
    """
    Dependency factory for role-restricted routes.

    Usage:
        @router.post("/items")
        async def create_item(user: User = Depends(require_admin)): ...
    """

    def __init__(self, roles: Optional[Iterable[str]] = None):
        self._roles = frozenset(roles) if roles is not None else None

    @property
    def required_roles(self) -> FrozenSet[str]:
        if self._roles is not None:
            return self._roles
        return frozenset(settings.admin_roles_list)

    async def __call__(
        self,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
        db: AsyncSession = Depends(get_db_session),
    ) -> User:
        context = await authorize(db, _bearer_token(credentials), self.required_roles)
        return context.user


# Admin roles come from settings.admin_roles at request time
require_admin = RoleGate()
