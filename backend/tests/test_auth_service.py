"""
SyncMe Backend — Auth Service Unit Tests
========================================

What we test:
    ✅ Signup stores the user verbatim; duplicate email is a Conflict
    ✅ Login succeeds only on an exact email AND password match
    ✅ X-User-Email resolution (absent → None, unknown → Unauthorized)
"""

import pytest
from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError

from syncme.exceptions import ConflictError, DatabaseError, UnauthorizedError
from syncme.services.auth_service import AuthService


class TestSignup:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_signup_stores_user(self, user_repo):
        user = await self.service.signup(user_repo, "a@b.c", "pw")

        assert user.id == 1
        assert user_repo.rows[0].email == "a@b.c"
        assert user_repo.rows[0].password == "pw"

    @pytest.mark.asyncio
    async def test_duplicate_signup_is_conflict_without_new_row(self, user_repo):
        await self.service.signup(user_repo, "a@b.c", "pw")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.signup(user_repo, "a@b.c", "other")

        assert exc_info.value.message == "Email already registered."
        assert len(user_repo.rows) == 1

    @pytest.mark.asyncio
    async def test_email_is_compared_verbatim(self, user_repo):
        await self.service.signup(user_repo, "a@b.c", "pw")
        await self.service.signup(user_repo, "A@B.C", "pw")

        assert len(user_repo.rows) == 2

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, user_repo):
        user_repo.insert = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("db down"))
        )

        with pytest.raises(DatabaseError):
            await self.service.signup(user_repo, "a@b.c", "pw")


class TestLogin:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_returns_email(self, user_repo):
        await self.service.signup(user_repo, "a@b.c", "pw")

        assert await self.service.login(user_repo, "a@b.c", "pw") == "a@b.c"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("a@b.c", "wrong"),
        ("nobody@b.c", "pw"),
        ("a@b.c", "PW"),
    ])
    async def test_login_rejects_any_mismatch(self, user_repo, email, password):
        await self.service.signup(user_repo, "a@b.c", "pw")

        with pytest.raises(UnauthorizedError) as exc_info:
            await self.service.login(user_repo, email, password)

        assert exc_info.value.message == "Invalid email or password."


class TestResolveSession:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_no_header_is_unscoped(self, user_repo):
        assert await self.service.resolve_session(user_repo, None) is None

    @pytest.mark.asyncio
    async def test_known_email_resolves_user(self, user_repo):
        created = await self.service.signup(user_repo, "a@b.c", "pw")

        assert await self.service.resolve_session(user_repo, "a@b.c") is created

    @pytest.mark.asyncio
    async def test_unknown_email_is_unauthorized(self, user_repo):
        with pytest.raises(UnauthorizedError):
            await self.service.resolve_session(user_repo, "ghost@b.c")
