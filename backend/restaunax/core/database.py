"""Async database engine, session management and the unit of work.

Configures the SQLAlchemy async engine with connection pooling, provides
dependency injection for database sessions, and the atomic scope used by
every composite mutation.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from restaunax.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of writes as one atomic unit.

    Commits when the block exits normally. Any exception rolls back every
    write made inside the block and is re-raised unchanged.

    Usage:
        async with unit_of_work(db):
            user = await UserRepository.create(db, ...)
            account = await AccountRepository.create(db, ...)

    Args:
        db: Async database session owned by the caller.

    Yields:
        The same session, for convenience.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise


async def dispose_engine() -> None:
    """Close pooled connections (called on graceful shutdown)."""
    await engine.dispose()
