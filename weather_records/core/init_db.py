import logging

from weather_records.core.db import engine
from weather_records.models import Base

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """
    Create the records tables if they do not already exist.

    `Base.metadata.create_all` is enough for the single-table schema used
    here; schema changes would need a migration tool such as Alembic.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
