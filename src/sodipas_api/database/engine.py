"""Database engine, async session factory and the write lock."""

import asyncio
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sodipas_api.config import settings
from sodipas_api.models import auth, logistics, records, user  # noqa: F401  (register tables)
from sodipas_api.models.base import Base

engine = create_async_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)

# Serializes read-modify-write cycles (single-process deployment).
write_lock = asyncio.Lock()


async def init_db() -> None:
    """Create all tables that don't yet exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session, committing on success and rolling back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def hold_write_lock() -> AsyncGenerator[None, None]:
    """Hold the write lock for the whole request, commit included."""
    async with write_lock:
        yield
