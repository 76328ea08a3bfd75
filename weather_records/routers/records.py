from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from weather_records.core.db import get_db
from weather_records.repositories.weather_record_repository import WeatherRecordRepository
from weather_records.schemas.records import WeatherRecord, WeatherRecordIn
from weather_records.services.export_service import ExportFormat, encode

router = APIRouter(prefix="/records", tags=["Records"])


async def _get_or_404(repo: WeatherRecordRepository, record_id: str):
    row = await repo.get_by_id(record_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Weather record not found")
    return row


@router.get(
    "",
    response_model=List[WeatherRecord],
    summary="List weather records",
    description="Returns all stored weather records in creation order.",
)
async def list_records(
    limit: int = Query(default=1000, ge=1, le=5000),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    repo = WeatherRecordRepository(db)
    rows = await repo.list_records(limit=limit, offset=offset)
    return [repo.to_schema(r) for r in rows]


@router.post(
    "",
    response_model=WeatherRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a weather record",
    description="Stores a record. The server assigns `id` and `createdAt`.",
)
async def create_record(payload: WeatherRecordIn, db: AsyncSession = Depends(get_db)):
    repo = WeatherRecordRepository(db)
    row = await repo.create(payload)
    return repo.to_schema(row)


@router.get(
    "/{record_id}",
    response_model=WeatherRecord,
    summary="Get a weather record",
)
async def get_record(record_id: str, db: AsyncSession = Depends(get_db)):
    repo = WeatherRecordRepository(db)
    return repo.to_schema(await _get_or_404(repo, record_id))


@router.put(
    "/{record_id}",
    response_model=WeatherRecord,
    summary="Replace a weather record",
    description="Replaces location, date range and observations. `createdAt` is kept.",
)
async def update_record(record_id: str, payload: WeatherRecordIn, db: AsyncSession = Depends(get_db)):
    repo = WeatherRecordRepository(db)
    row = await repo.update(record_id, payload)
    if row is None:
        raise HTTPException(status_code=404, detail="Weather record not found")
    return repo.to_schema(row)


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a weather record",
)
async def delete_record(record_id: str, db: AsyncSession = Depends(get_db)):
    repo = WeatherRecordRepository(db)
    if not await repo.delete(record_id):
        raise HTTPException(status_code=404, detail="Weather record not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{record_id}/export",
    summary="Export a weather record",
    description=(
        "Downloads a stored record as JSON or CSV.\n\n"
        "- JSON values are rounded to one decimal, missing values are `null`.\n"
        "- CSV starts with `#` metadata lines followed by one row per day."
    ),
    response_class=Response,
)
async def export_record(
    record_id: str,
    format: ExportFormat = Query(default=ExportFormat.JSON, description="Export format: json or csv"),
    db: AsyncSession = Depends(get_db),
):
    repo = WeatherRecordRepository(db)
    record = repo.to_schema(await _get_or_404(repo, record_id))
    document = encode(record, format)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
