"""
Showcase Backend — Role Gate Tests
====================================

Decision table under test:
    no / unknown / expired token → UnauthenticatedError
    valid token, wrong role      → ForbiddenError
    valid token, allowed role    → AuthContext
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from showcase.exceptions import ForbiddenError, UnauthenticatedError
from showcase.middleware.role_gate import RoleGate, authorize
from showcase.services.token_service import token_service
from showcase.services.user_service import create_user


async def _issue(db, email, role):
    user = await create_user(db, email=email, password="secret1", role=role)
    row, plain = await token_service.issue(db, user)
    return user, row, plain


class TestAuthorize:

    @pytest.mark.asyncio
    async def test_admin_passes_admin_gate(self, db_session):
        admin, _, plain = await _issue(db_session, "a@example.com", "admin")

        context = await authorize(db_session, plain, {"admin"})

        assert context.user.id == admin.id
        assert context.token.user_id == admin.id

    @pytest.mark.asyncio
    async def test_user_is_forbidden(self, db_session):
        _, _, plain = await _issue(db_session, "u@example.com", "user")
        with pytest.raises(ForbiddenError):
            await authorize(db_session, plain, {"admin"})

    @pytest.mark.asyncio
    async def test_no_required_roles_admits_any_user(self, db_session):
        user, _, plain = await _issue(db_session, "u@example.com", "user")
        context = await authorize(db_session, plain)
        assert context.user.id == user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("presented", [None, "", "1|not-the-secret", "nonsense"])
    async def test_unresolvable_tokens_are_unauthenticated(self, db_session, presented):
        await _issue(db_session, "a@example.com", "admin")
        with pytest.raises(UnauthenticatedError):
            await authorize(db_session, presented, {"admin"})

    @pytest.mark.asyncio
    async def test_expired_admin_token_is_unauthenticated_not_forbidden(self, db_session):
        _, row, plain = await _issue(db_session, "a@example.com", "admin")
        row.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        await db_session.flush()

        with pytest.raises(UnauthenticatedError):
            await authorize(db_session, plain, {"admin"})


class TestRoleGateDependency:

    @pytest.mark.asyncio
    async def test_default_roles_come_from_settings(self):
        with patch("showcase.middleware.role_gate.settings") as mock_settings:
            mock_settings.admin_roles_list = ["admin", "editor"]
            assert RoleGate().required_roles == frozenset({"admin", "editor"})

    @pytest.mark.asyncio
    async def test_explicit_roles_override_settings(self):
        assert RoleGate(["user"]).required_roles == frozenset({"user"})

    @pytest.mark.asyncio
    async def test_call_returns_user(self, db_session):
        admin, _, plain = await _issue(db_session, "a@example.com", "admin")
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=plain)

        user = await RoleGate(["admin"])(credentials=credentials, db=db_session)

        assert user.id == admin.id

    @pytest.mark.asyncio
    async def test_call_without_credentials_raises(self, db_session):
        with pytest.raises(UnauthenticatedError):
            await RoleGate(["admin"])(credentials=None, db=db_session)
