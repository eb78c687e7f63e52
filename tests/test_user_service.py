"""Credential store helpers: account creation, password reset, bootstrap admin."""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from showcase.exceptions import ValidationError
from showcase.models.user import User
from showcase.security import verify_password
from showcase.services.token_service import token_service
from showcase.services.user_service import (
    bootstrap_admin_if_needed,
    create_user,
    get_user_by_email,
    set_password,
)


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_email_is_normalized_and_password_hashed(self, db_session):
        user = await create_user(db_session, email="  Alice@Example.COM ", password="secret1", role="admin")

        assert user.email == "alice@example.com"
        assert user.role == "admin"
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)

    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive(self, db_session):
        await create_user(db_session, email="bob@example.com", password="secret1")
        found = await get_user_by_email(db_session, " BOB@example.com")
        assert found is not None
        assert found.role == "user"

    @pytest.mark.asyncio
    async def test_blank_lookup_returns_none(self, db_session):
        assert await get_user_by_email(db_session, "   ") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"email": "", "password": "secret1"}, "email"),
            ({"email": "a@b.c", "password": "short"}, "password"),
            ({"email": "a@b.c", "password": "secret1", "role": "root"}, "role"),
        ],
    )
    async def test_rejects_bad_input(self, db_session, kwargs, field):
        with pytest.raises(ValidationError) as exc_info:
            await create_user(db_session, **kwargs)
        assert field in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db_session):
        await create_user(db_session, email="dup@example.com", password="secret1")
        with pytest.raises(ValidationError, match="already been taken"):
            await create_user(db_session, email="DUP@example.com", password="secret2")


class TestSetPassword:

    @pytest.mark.asyncio
    async def test_new_password_revokes_tokens(self, db_session):
        user = await create_user(db_session, email="carol@example.com", password="secret1")
        _, plain = await token_service.issue(db_session, user)

        await set_password(db_session, user, "brand-new")
        db_session.expunge_all()

        reloaded = await get_user_by_email(db_session, "carol@example.com")
        assert verify_password("brand-new", reloaded.password_hash)
        assert await token_service.resolve(db_session, plain) is None

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, db_session):
        user = await create_user(db_session, email="dan@example.com", password="secret1")
        with pytest.raises(ValidationError):
            await set_password(db_session, user, "123")


class TestBootstrapAdmin:

    @pytest.mark.asyncio
    async def test_creates_admin_when_table_empty(self, db_session):
        with patch("showcase.services.user_service.settings") as mock_settings:
            mock_settings.bootstrap_admin_email = "Root@Example.com"
            mock_settings.bootstrap_admin_password = "bootstrap-pass"
            mock_settings.admin_roles_list = ["admin"]

            user = await bootstrap_admin_if_needed(db_session)

        assert user is not None
        assert user.email == "root@example.com"
        assert user.role == "admin"

    @pytest.mark.asyncio
    async def test_noop_when_users_exist(self, db_session):
        await create_user(db_session, email="existing@example.com", password="secret1")
        with patch("showcase.services.user_service.settings") as mock_settings:
            mock_settings.bootstrap_admin_email = "root@example.com"
            mock_settings.bootstrap_admin_password = "bootstrap-pass"
            mock_settings.admin_roles_list = ["admin"]

            assert await bootstrap_admin_if_needed(db_session) is None

        count = (await db_session.execute(select(func.count(User.id)))).scalar()
        assert count == 1

    @pytest.mark.asyncio
    async def test_noop_when_not_configured(self, db_session):
        assert await bootstrap_admin_if_needed(db_session) is None
