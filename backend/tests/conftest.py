"""
POS checklist service - test configuration and fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Set testing environment before the application is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./pos_checklist_test_unused.db"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["COOKIE_SECURE"] = "false"

from pos_checklist.main import app
from pos_checklist.database import Base, get_db
from pos_checklist.auth import TokenCodec, UserPrincipal, get_token_codec
from pos_checklist.services.auth_service import create_user

TEST_SECRET = "test-jwt-secret-key-for-testing"


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """A fresh database per test."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture
async def client(db_engine, codec) -> AsyncGenerator[AsyncClient, None]:
    """Test client bound to the per-test database and token codec."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_codec] = lambda: codec

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(db_session):
    return await create_user(db_session, "cashier01", "s3cret-pass")


@pytest.fixture
async def other_user(db_session):
    return await create_user(db_session, "cashier02", "other-pass")


@pytest.fixture
def principal(test_user) -> UserPrincipal:
    return UserPrincipal(user_id=test_user.id, username=test_user.username)


@pytest.fixture
def auth_headers(test_user, codec) -> dict:
    """Bearer header for the test user"""
    return {"Authorization": f"Bearer {codec.issue(test_user.id, test_user.username)}"}


@pytest.fixture
def other_auth_headers(other_user, codec) -> dict:
    return {"Authorization": f"Bearer {codec.issue(other_user.id, other_user.username)}"}
