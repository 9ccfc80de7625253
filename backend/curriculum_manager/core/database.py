"""
Curriculum Manager - Database Configuration
Async SQLAlchemy engine and session management
"""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from curriculum_manager.core.config import Settings, settings


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine``; SQLite takes no pool sizing."""
    options: dict[str, Any] = {"echo": config.DEBUG, "pool_pre_ping": True}
    if not config.DATABASE_URL.startswith("sqlite"):
        options.update(pool_size=config.DB_POOL_SIZE, max_overflow=config.DB_MAX_OVERFLOW)
    return options


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables."""
    # Register every model on Base.metadata before create_all
    import curriculum_manager.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
