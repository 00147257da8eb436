from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
from typing import AsyncGenerator
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current time used for all stored timestamps"""
    return datetime.now(timezone.utc)


def _engine_options(url: str) -> dict:
    """Pool options only apply to server databases"""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL)
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session scoped to one request"""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create tables for all registered models"""
    # Import models so they register on Base.metadata
    from app import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


async def close_db() -> None:
    """Dispose of the engine connection pool"""
    await engine.dispose()
    logger.info("Database connections closed")
