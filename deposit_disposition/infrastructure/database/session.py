"""Async database session management with connection pooling"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from deposit_disposition.config import settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Engine is created on first use so importing the app needs no database driver"""
    # Recycle after 1 hour to avoid stale connections
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency injection for database sessions"""
    async with get_session_factory()() as db:
        yield db
