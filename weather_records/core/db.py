from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from weather_records.core.config import settings


# ---------------------------------------------------------------------
# Database engine
# ---------------------------------------------------------------------

# Asynchronous SQLAlchemy engine backing the records persistence API.
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,  # Validates connections before using them
)


# ---------------------------------------------------------------------
# Database session factory
# ---------------------------------------------------------------------

# `expire_on_commit=False` keeps loaded rows usable after commit so that
# routers can serialize them once the repository has committed.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------
# Dependency injection
# ---------------------------------------------------------------------

async def get_db() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency that provides an asynchronous database session.

    A new `AsyncSession` is created for each request and closed once the
    request lifecycle ends.
    """
    async with AsyncSessionLocal() as session:
        yield session
