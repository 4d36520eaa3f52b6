"""
Gahoi Sathi — Registration, Login & Sessions

Session tokens are opaque random strings handed to the client once; the
database only keeps their SHA-256 so a leaked table cannot be replayed.
Each login creates a ``UserSession`` row that expires after
``SESSION_TTL_DAYS``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import utcnow
from app.errors import AuthenticationError, ConflictError
from app.models.user import User, UserSession
from app.services.user_service import age_from_dob, completeness
from app.utils.security import generate_token, hash_password, hash_token, verify_password

logger = structlog.get_logger("sathi.auth_service")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored value is UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuthService:
    def __init__(self, push_service: Any | None = None) -> None:
        self.push_service = push_service
        settings = get_settings()
        self.session_ttl = timedelta(days=settings.SESSION_TTL_DAYS)
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS

    async def _open_session(self, user: User, db: AsyncSession) -> tuple[str, UserSession]:
        token = generate_token()
        session = UserSession(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=utcnow() + self.session_ttl,
            last_seen_at=utcnow(),
        )
        db.add(session)
        await db.flush()
        return token, session

    async def register(self, data: dict, db: AsyncSession) -> tuple[User, str, UserSession]:
        """Create a member account and log it in.

        Raises
        ------
        ConflictError
            The email or phone number is already registered.
        """
        email = (data.get("email") or "").strip().lower() or None
        phone = (data.get("phone") or "").strip() or None
        log = logger.bind(email=email, phone=phone)

        clauses = []
        if email:
            clauses.append(User.email == email)
        if phone:
            clauses.append(User.phone == phone)
        existing = await db.execute(select(User.id).where(or_(*clauses)))
        if existing.first() is not None:
            log.info("register_duplicate")
            raise ConflictError("User with this email or phone already exists")

        fields = {k: v for k, v in data.items() if k not in ("email", "phone", "password")}
        if fields.get("date_of_birth") and not fields.get("age"):
            fields["age"] = age_from_dob(fields["date_of_birth"])

        # bcrypt is CPU-bound; keep it off the event loop.
        password_hash = await asyncio.to_thread(hash_password, data["password"], rounds=self.bcrypt_rounds)
        user = User(
            email=email,
            phone=phone,
            password_hash=password_hash,
            photos=[],
            **fields,
        )
        user.is_profile_complete = completeness(user)["is_profile_complete"]
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConflictError("User with this email or phone already exists") from exc

        token, session = await self._open_session(user, db)
        log.info("user_registered", user_id=str(user.id))
        return user, token, session

    async def login(self, identifier: str, password: str, db: AsyncSession) -> tuple[User, str, UserSession]:
        ident = identifier.strip()
        result = await db.execute(
            select(User).where(or_(User.email == ident.lower(), User.phone == ident))
        )
        user = result.scalars().first()
        if user is None or not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info("login_failed", identifier=ident)
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        token, session = await self._open_session(user, db)
        logger.info("login_succeeded", user_id=str(user.id))
        return user, token, session

    async def logout(self, token: str, db: AsyncSession) -> None:
        """Close the session and stop push delivery to this member."""
        result = await db.execute(
            select(UserSession).where(UserSession.token_hash == hash_token(token))
        )
        session = result.scalar_one_or_none()
        if session is None:
            return
        session.is_active = False
        if self.push_service is not None:
            await self.push_service.deactivate_user_subscriptions(session.user_id, db)
        await db.flush()
        logger.info("logout", user_id=str(session.user_id))

    async def authenticate(self, token: str | None, db: AsyncSession) -> User:
        """Resolve a bearer token to an active user."""
        if not token:
            raise AuthenticationError("Authentication required")

        result = await db.execute(
            select(UserSession).where(UserSession.token_hash == hash_token(token))
        )
        session = result.scalar_one_or_none()
        if session is None or not session.is_active:
            raise AuthenticationError("Invalid or expired session")

        now = utcnow()
        if _as_utc(session.expires_at) <= now:
            session.is_active = False
            # Persist the deactivation even though the request fails.
            await db.commit()
            raise AuthenticationError("Session expired")

        user = await db.get(User, session.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Account is deactivated")

        session.last_seen_at = now
        await db.flush()
        return user
