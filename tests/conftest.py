"""Shared pytest fixtures for Gahoi Sathi tests."""
import os
import tempfile

# Settings are read once at import time, so the test environment must be in
# place before anything under ``app`` is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_DIR"] = os.path.join(tempfile.mkdtemp(prefix="sathi-tests-"), "photos")
os.environ["STORAGE_TYPE"] = "local"
os.environ["REDIS_URL"] = ""
os.environ["VAPID_PUBLIC_KEY"] = ""
os.environ["VAPID_PRIVATE_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

import uuid
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, discard_after_commit, get_db, run_after_commit, utcnow
import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.models.user import User, UserSession
from app.services.interest_service import InterestService
from app.services.message_service import MessageService
from app.services.notification_service import NotificationService
from app.services.profile_view_service import ProfileViewService
from app.utils.security import generate_token, hash_password, hash_token

TEST_PASSWORD = "secret-pass"
# Minimum bcrypt cost keeps user fixtures fast.
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD, rounds=4)


class RecordingHub:
    """Stands in for the realtime hub and remembers every emitted hint."""

    def __init__(self):
        self.events = []

    async def emit_to_user(self, user_id, event, data):
        self.events.append((str(user_id), event, data))


# ── Database ────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def commit(db):
    """Commit the test session and run its post-commit callbacks."""

    async def _commit() -> None:
        await db.commit()
        await run_after_commit(db)

    return _commit


# ── Users ───────────────────────────────────────────────────────────────────

@pytest.fixture
def make_user(db):
    """Factory that inserts a member and returns it."""
    counter = {"n": 0}

    async def _make(**overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "email": f"member{n}-{uuid.uuid4().hex[:6]}@example.com",
            "password_hash": TEST_PASSWORD_HASH,
            "name": f"Member {n}",
            "gender": "female" if n % 2 else "male",
            "age": 25 + n,
            "city": "Jhansi",
            "religion": "Hindu",
            "photos": [],
        }
        fields.update(overrides)
        user = User(**fields)
        db.add(user)
        await db.flush()
        return user

    return _make


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user(name="Alice", gender="female")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user(name="Bob", gender="male")


@pytest.fixture
def login_token(db):
    """Open a session for a user and return its bearer token."""

    async def _login(user: User, ttl: timedelta = timedelta(days=7)) -> str:
        token = generate_token()
        db.add(
            UserSession(
                user_id=user.id,
                token_hash=hash_token(token),
                expires_at=utcnow() + ttl,
            )
        )
        await db.commit()
        return token

    return _login


# ── Services ────────────────────────────────────────────────────────────────

@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def notification_service(hub):
    return NotificationService(push_service=None, realtime_hub=hub)


@pytest.fixture
def profile_view_service(notification_service):
    return ProfileViewService(notification_service)


@pytest.fixture
def interest_service(notification_service):
    return InterestService(notification_service)


@pytest.fixture
def message_service(notification_service, profile_view_service, hub):
    return MessageService(notification_service, profile_view_service, hub)


# ── HTTP ────────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def api(session_factory):
    """httpx client wired to the FastAPI app with the test database."""
    from app.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                discard_after_commit(session)
                await session.rollback()
                raise
            else:
                await run_after_commit(session)

    app.dependency_overrides[get_db] = _override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
