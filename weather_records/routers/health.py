import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_records.core.config import settings
from weather_records.core.db import get_db
from weather_records.repositories.weather_record_repository import WeatherRecordRepository
from weather_records.services.date_range import RangePolicy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Service health check",
    description=(
        "Reports the service name and environment together with the range policy "
        "the history endpoint enforces. Neither the database nor the weather "
        "providers are contacted."
    ),
    response_description="Service status",
)
def health():
    policy = RangePolicy.from_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.environment,
        "maxRangeDays": policy.max_days,
        "archiveLagDays": policy.archive_lag_days,
    }


@router.get(
    "/health/db",
    summary="Records storage health check",
    description=(
        "Counts the stored weather records. Answers 503 when the `weather_records` "
        "table cannot be read, e.g. the database is down or the schema was not created."
    ),
    response_description="Records storage status",
)
async def health_db(db: AsyncSession = Depends(get_db)):
    try:
        total = await WeatherRecordRepository(db).count()
    except SQLAlchemyError as e:
        logger.error("Records storage check failed: %s", e)
        raise HTTPException(status_code=503, detail="Records storage unavailable") from e
    return {"status": "ok", "db": "ok", "records": total}
