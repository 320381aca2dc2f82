"""
Database connection and session management.

Two databases are in play: the dashboard database (sites, users, payees)
and the read-only reporting database (revenue reports, health checks).
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from dashboard_api.core.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

reporting_engine = create_async_engine(
    settings.reporting_database_url,
    echo=settings.debug,
    future=True,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

reporting_session_factory = sessionmaker(
    reporting_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for dashboard database sessions."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_reporting_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for reporting database sessions (reads only)."""
    async with reporting_session_factory() as session:
        yield session
