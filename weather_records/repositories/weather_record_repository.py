import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_records.models.weather_record import WeatherRecordRow
from weather_records.schemas.records import Coordinates, DailyObservation, DateRange, Location, WeatherRecord, WeatherRecordIn


class WeatherRecordRepository:
    """
    Repository for stored weather records.

    Encapsulates the SQLAlchemy queries behind the records persistence API
    and converts between `WeatherRecordRow` and the `WeatherRecord` schema.
    """

    def __init__(self, db: AsyncSession):
        """
        Args:
            db: Asynchronous SQLAlchemy session.
        """
        self.db = db

    @staticmethod
    def to_schema(row: WeatherRecordRow) -> WeatherRecord:
        created_at = row.created_at
        # SQLite drops tzinfo on the way back
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return WeatherRecord(
            id=row.id,
            location=Location(
                display_name=row.location_name,
                coordinates=Coordinates(latitude=row.latitude, longitude=row.longitude),
            ),
            date_range=DateRange(start=row.start_date, end=row.end_date),
            observations=[DailyObservation.model_validate(o) for o in row.observations or []],
            created_at=created_at,
        )

    @staticmethod
    def _apply(row: WeatherRecordRow, data: WeatherRecordIn) -> None:
        row.location_name = data.location.display_name
        row.latitude = data.location.coordinates.latitude
        row.longitude = data.location.coordinates.longitude
        row.start_date = data.date_range.start
        row.end_date = data.date_range.end
        row.observations = [
            o.model_dump(mode="json", by_alias=True)
            for o in sorted(data.observations, key=lambda o: o.date)
        ]

    async def get_by_id(self, record_id: str) -> Optional[WeatherRecordRow]:
        """
        Return a record by id, or None if not found.
        """
        stmt = select(WeatherRecordRow).where(WeatherRecordRow.id == record_id)
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def list_records(self, limit: int = 1000, offset: int = 0) -> List[WeatherRecordRow]:
        """
        List records in creation order.
        """
        stmt = (
            select(WeatherRecordRow)
            .order_by(WeatherRecordRow.created_at.asc(), WeatherRecordRow.id.asc())
            .limit(limit)
            .offset(offset)
        )
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def count(self) -> int:
        stmt = select(func.count()).select_from(WeatherRecordRow)
        res = await self.db.execute(stmt)
        return res.scalar_one()

    async def create(self, data: WeatherRecordIn) -> WeatherRecordRow:
        """
        Store a new record. The id and creation time are assigned here.
        """
        row = WeatherRecordRow(
            id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
        )
        self._apply(row, data)
        self.db.add(row)
        await self.db.commit()
        return row

    async def update(self, record_id: str, data: WeatherRecordIn) -> Optional[WeatherRecordRow]:
        """
        Replace the content of an existing record, keeping its creation time.

        Returns:
            The updated row, or None if no record has this id.
        """
        row = await self.get_by_id(record_id)
        if row is None:
            return None

        self._apply(row, data)
        row.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return row

    async def delete(self, record_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if a record was deleted, False if none had this id.
        """
        row = await self.get_by_id(record_id)
        if row is None:
            return False

        await self.db.delete(row)
        await self.db.commit()
        return True
