import os
import sys
from collections.abc import AsyncGenerator
from datetime import date, timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Load environment variables from .env file
load_dotenv()

from app.config import settings
from app.core.security import create_user_token, get_password_hash
from app.database import build_async_url, get_db
from app.dependencies import get_cache_manager, get_event_transport
from app.main import app
from app.models import metadata, users

# Test database URL - MUST be different from production.
# Defaults to an in-memory SQLite database.
TEST_DATABASE_URL = build_async_url(os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://"))

# Safety check: prevent running tests against production database
if build_async_url(settings.database_url) == TEST_DATABASE_URL:
    print("\n❌ CRITICAL ERROR: Test database URL is same as production database!")
    print("This would DROP all production data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)

TEST_PASSWORD = "password123"

# Hashing is slow; hash once for every seeded account
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


class InMemoryPublisher:
    """Publisher that records events instead of sending them."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def publish(self, topic: str, payload: dict) -> None:
        self.events.append((topic, payload))

    def topics(self) -> list[str]:
        """Get published topics in order."""
        return [topic for topic, _ in self.events]


def make_engine(url: str = TEST_DATABASE_URL) -> AsyncEngine:
    """Create an engine for one test."""
    if url == "sqlite+aiosqlite://":
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url)


async def insert_user(session: AsyncSession, role: str, **overrides) -> dict:
    """Insert a user with the shared test password and return its row."""
    suffix = uuid4().hex[:8]
    values = {
        "id": uuid4(),
        "username": f"{role}_{suffix}",
        "email": f"{role}_{suffix}@example.com",
        "hashed_password": TEST_PASSWORD_HASH,
        "first_name": role.capitalize(),
        "last_name": suffix,
        "role": role,
        "is_active": True,
    }
    values.update(overrides)
    result = await session.execute(insert(users).values(**values).returning(users))
    user = dict(result.mappings().first())
    await session.commit()
    return user


def auth_header(user: dict) -> dict:
    """Bearer header for a user."""
    return {"Authorization": f"Bearer {create_user_token(user)}"}


def next_weekday(start: date | None = None) -> date:
    """First Monday-to-Friday date after ``start`` (default today)."""
    day = (start or date.today()) + timedelta(days=1)
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh schema for one test."""
    test_engine = make_engine()
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher() -> InMemoryPublisher:
    """Publisher that records events instead of sending them."""
    return InMemoryPublisher()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    publisher: InMemoryPublisher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_transport] = lambda: publisher
    app.dependency_overrides[get_cache_manager] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "admin")


@pytest_asyncio.fixture
async def nurse(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "nurse")


@pytest_asyncio.fixture
async def receptionist(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "receptionist")


@pytest_asyncio.fixture
async def doctor(db_session: AsyncSession) -> dict:
    return await insert_user(
        db_session, "doctor", department="Cardiology", specialization="Cardiologist"
    )


@pytest_asyncio.fixture
async def other_doctor(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "doctor", department="Neurology")


@pytest_asyncio.fixture
async def patient(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "user")


@pytest_asyncio.fixture
async def other_patient(db_session: AsyncSession) -> dict:
    return await insert_user(db_session, "patient")


@pytest.fixture
def booking_day() -> date:
    """A weekday in the future."""
    return next_weekday()
