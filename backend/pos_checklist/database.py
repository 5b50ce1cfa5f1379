from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from pos_checklist.config import get_settings

Base = declarative_base()


def get_database_url() -> str:
    """Get properly formatted async database URL."""
    db_url = get_settings().database_url
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def _create_engine():
    db_url = get_database_url()
    if db_url.startswith("sqlite"):
        # SQLite connections cannot be shared across threads
        return create_async_engine(
            db_url,
            echo=get_settings().db_echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
    return create_async_engine(db_url, echo=get_settings().db_echo, pool_pre_ping=True)


engine = _create_engine()
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session; writes commit explicitly in the services."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    await engine.dispose()
