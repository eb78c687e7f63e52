"""
Showcase Backend — Auth Service Tests
=======================================

What:  Login / logout against the in-memory database.

What we test:
    ✅ Valid credentials return the public user and a working token
    ✅ Unknown email and wrong password raise the same error
    ✅ The dummy hash check runs when the email is unknown
    ✅ Logout revokes only the current token
"""

from unittest.mock import patch

import pytest

from showcase.exceptions import InvalidCredentialsError
from showcase.services.auth_service import AuthService
from showcase.services.token_service import TokenService
from showcase.services.user_service import create_user


class TestLogin:

    def setup_method(self):
        self.tokens = TokenService()
        self.service = AuthService(tokens=self.tokens)

    @pytest.mark.asyncio
    async def test_login_success(self, db_session):
        user = await create_user(db_session, email="admin@example.com", password="secret-admin", role="admin")

        result = await self.service.login(db_session, "Admin@Example.com ", "secret-admin")

        assert result.user.id == user.id
        assert result.user.email == "admin@example.com"
        assert result.user.role == "admin"
        assert "password_hash" not in result.model_dump()["user"]
        assert await self.tokens.resolve(db_session, result.token) is not None

    @pytest.mark.asyncio
    async def test_remember_flag_is_accepted(self, db_session):
        await create_user(db_session, email="r@example.com", password="secret1")
        result = await self.service.login(db_session, "r@example.com", "secret1", remember=True)
        assert result.token

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_are_indistinguishable(self, db_session):
        await create_user(db_session, email="known@example.com", password="secret1")

        with pytest.raises(InvalidCredentialsError) as unknown:
            await self.service.login(db_session, "nobody@example.com", "secret1")
        with pytest.raises(InvalidCredentialsError) as wrong:
            await self.service.login(db_session, "known@example.com", "wrong-password")

        assert unknown.value.message == wrong.value.message
        assert unknown.value.errors == wrong.value.errors == {"email": ["email or password is incorrect."]}

    @pytest.mark.asyncio
    async def test_unknown_email_still_hashes(self, db_session):
        with patch("showcase.services.auth_service.burn_password_check") as burn:
            with pytest.raises(InvalidCredentialsError):
                await self.service.login(db_session, "ghost@example.com", "secret1")
        burn.assert_called_once_with("secret1")

    @pytest.mark.asyncio
    async def test_failed_login_issues_no_token(self, db_session):
        await create_user(db_session, email="known@example.com", password="secret1")
        with patch.object(self.tokens, "issue") as issue:
            with pytest.raises(InvalidCredentialsError):
                await self.service.login(db_session, "known@example.com", "nope-nope")
        issue.assert_not_called()


class TestLogout:

    def setup_method(self):
        self.tokens = TokenService()
        self.service = AuthService(tokens=self.tokens)

    @pytest.mark.asyncio
    async def test_logout_revokes_current_token_only(self, db_session):
        await create_user(db_session, email="u@example.com", password="secret1")
        laptop = await self.service.login(db_session, "u@example.com", "secret1")
        phone = await self.service.login(db_session, "u@example.com", "secret1")

        _, current = await self.tokens.resolve(db_session, laptop.token)
        await self.service.logout(db_session, current)
        db_session.expunge_all()

        assert await self.tokens.resolve(db_session, laptop.token) is None
        assert await self.tokens.resolve(db_session, phone.token) is not None
