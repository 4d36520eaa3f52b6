"""Tests for registration, login and session handling."""
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.errors import AuthenticationError, ConflictError
from app.models.user import UserSession
from app.services.auth_service import AuthService
from app.utils.security import hash_password, hash_token, verify_password

PASSWORD = "ravi-pass-123"


@pytest.fixture
def auth():
    return AuthService()


def _registration(**overrides):
    data = {
        "email": "Asha@Example.com",
        "phone": None,
        "password": "s3cret-pass",
        "name": "Asha",
        "gender": "female",
        "age": 27,
    }
    data.update(overrides)
    return data


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_normalises_email_and_opens_session(self, db, auth):
        user, token, session = await auth.register(_registration(), db)

        assert user.email == "asha@example.com"
        assert user.password_hash.startswith("$2b$04$")
        assert verify_password("s3cret-pass", user.password_hash)
        assert session.token_hash == hash_token(token)
        assert session.is_active is True

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, db, auth):
        await auth.register(_registration(), db)
        with pytest.raises(ConflictError):
            await auth.register(_registration(email="asha@example.com"), db)


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_by_email_or_phone(self, db, auth, make_user):
        user = await make_user(
            email="ravi@example.com", phone="9876543210", password_hash=hash_password(PASSWORD, rounds=4)
        )

        by_email, _, _ = await auth.login("RAVI@example.com", PASSWORD, db)
        by_phone, _, _ = await auth.login("9876543210", PASSWORD, db)
        assert by_email.id == by_phone.id == user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, db, auth, alice):
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await auth.login(alice.email, "nope", db)

    @pytest.mark.asyncio
    async def test_deactivated_account(self, db, auth, make_user):
        user = await make_user(is_active=False, password_hash=hash_password(PASSWORD, rounds=4))
        with pytest.raises(AuthenticationError, match="deactivated"):
            await auth.login(user.email, PASSWORD, db)


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_token_resolves_user(self, db, auth, alice, login_token):
        token = await login_token(alice)
        assert (await auth.authenticate(token, db)).id == alice.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "not-a-real-token"])
    async def test_missing_or_unknown_token(self, db, auth, token):
        with pytest.raises(AuthenticationError):
            await auth.authenticate(token, db)

    @pytest.mark.asyncio
    async def test_expired_session_is_deactivated(self, db, auth, alice, login_token):
        token = await login_token(alice, ttl=timedelta(seconds=-1))

        with pytest.raises(AuthenticationError, match="Session expired"):
            await auth.authenticate(token, db)

        session = (await db.execute(select(UserSession))).scalar_one()
        assert session.is_active is False

    @pytest.mark.asyncio
    async def test_logout_invalidates_token(self, db, auth, alice, login_token):
        token = await login_token(alice)
        await auth.logout(token, db)
        with pytest.raises(AuthenticationError):
            await auth.authenticate(token, db)
