# File: tests/conftest.py
"""Pytest configuration and fixtures."""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import stallpilot.models  # noqa: F401 - registers every table on Base.metadata
from stallpilot.core.cache import clear_cache
from stallpilot.core.db import Base, get_db
from stallpilot.main import create_app
from stallpilot.models.enums import UserRole
from stallpilot.models.user import User
from tests.factories import UserFactory

# Point at a Postgres database to run against the production dialect, e.g.
# postgresql+asyncpg://stallpilot:dev_password_change_in_prod@db:5432/stallpilot_test
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_PIN = "1234"


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared in-memory database for the whole test
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {}


@pytest.fixture(autouse=True)
def reset_report_cache():
    """Reports are cached in-process; start every test with an empty cache."""
    clear_cache()
    yield
    clear_cache()


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create fresh DB session for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


def build_app(db_session: AsyncSession):
    """App whose requests all share the test's DB session."""
    app = create_app()

    async def override_get_db():
        # Commit like get_db so commit hooks (report invalidation) fire
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db
    return app


async def login(client: AsyncClient, name: str, pin: str = TEST_PIN):
    """Log in through the real form so the signed session cookie is stored."""
    response = await client.post("/login", data={"name": name, "pin": pin})
    assert response.status_code == 303, response.text
    return response


@pytest_asyncio.fixture
async def client(db_session):
    """Unauthenticated client."""
    app = build_app(db_session)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def admin_user(db_session) -> User:
    return await UserFactory.create(db_session, name="Owner", pin=TEST_PIN, role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def staff_user(db_session) -> User:
    return await UserFactory.create(db_session, name="Ana", pin=TEST_PIN, role=UserRole.STAFF)


@pytest_asyncio.fixture
async def admin_client(db_session, admin_user):
    """Client logged in as the admin."""
    app = build_app(db_session)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await login(ac, admin_user.name)
        ac.test_user = admin_user
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def staff_client(db_session, staff_user):
    """Client logged in as staff, with a shift opened by the login."""
    app = build_app(db_session)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await login(ac, staff_user.name)
        ac.test_user = staff_user
        ac.db_session = db_session
        yield ac
