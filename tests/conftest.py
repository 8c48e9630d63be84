"""
Shared test fixtures for the attendance backend test suite.

Each test gets a fresh in-memory SQLite database (aiosqlite + StaticPool)
wired into the app through ``dependency_overrides[get_db]``.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"
os.environ["REGISTER_RATE_LIMIT"] = "1000/minute"
os.environ["SECRET_KEY"] = "test-secret-key"

from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.core.dates import today_display_date
from app.core.security import get_password_hash
from app.db.base import Base
from app.main import app
from app.models.user import ROLE_ADMIN, ROLE_EMPLOYEE, STATUS_APPROVED, User


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """A brand-new in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory) -> Callable[..., Awaitable[User]]:
    """Insert a user directly, bypassing registration and approval."""

    async def _make_user(
        username: str,
        password: str = "secret123",
        *,
        name: str | None = None,
        role: str = ROLE_EMPLOYEE,
        account_status: str | None = STATUS_APPROVED,
        hashed: bool = True,
        **extra,
    ) -> User:
        user = User(
            name=name or username.split("@")[0].title(),
            username=username,
            hashed_password=get_password_hash(password) if hashed else password,
            join_date=today_display_date(),
            role=role,
            account_status=account_status,
            **extra,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            if account_status is None:
                # The ORM skips None and would apply the "pending" default
                await session.execute(
                    update(User).where(User.id == user.id).values(account_status=None)
                )
                await session.commit()
                user.account_status = None
        return user

    return _make_user


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("boss@example.com", name="Boss Admin", role=ROLE_ADMIN)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return {"X-User-Id": str(admin.id)}
