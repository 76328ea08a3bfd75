from __future__ import annotations

import logging
from typing import Dict, List, Optional

from weather_records.core.errors import IncompleteRecord
from weather_records.schemas.records import WeatherRecord
from weather_records.services.providers.records_client import RecordsClient

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Record store facade.

    Wraps the records persistence API and keeps a local cache that mirrors
    the server state. The cache is only changed after the server confirmed
    the operation; on any failure it is left untouched.
    """

    def __init__(self, client: Optional[RecordsClient] = None):
        self.client = client or RecordsClient()
        # dicts keep insertion order, which is the order records are listed in
        self._cache: Dict[str, WeatherRecord] = {}

    @property
    def records(self) -> List[WeatherRecord]:
        return list(self._cache.values())

    def get(self, record_id: str) -> Optional[WeatherRecord]:
        return self._cache.get(record_id)

    @staticmethod
    def _check_complete(draft: WeatherRecord) -> None:
        if not draft.location.display_name.strip() or not draft.observations:
            raise IncompleteRecord()

    def _upsert(self, record: WeatherRecord) -> None:
        # replacing the value of an existing key keeps its position
        self._cache[record.id] = record

    async def list(self) -> List[WeatherRecord]:
        records = await self.client.list_records()
        self._cache = {r.id: r for r in records}
        return self.records

    async def create(self, draft: WeatherRecord) -> WeatherRecord:
        self._check_complete(draft)
        record = await self.client.create_record(draft)
        self._upsert(record)
        logger.info("Created weather record %s for %s", record.id, record.location.display_name)
        return record

    async def update(self, record_id: str, draft: WeatherRecord) -> WeatherRecord:
        self._check_complete(draft)
        record = await self.client.update_record(record_id, draft)
        self._upsert(record)
        logger.info("Updated weather record %s", record_id)
        return record

    async def delete(self, record_id: str) -> None:
        await self.client.delete_record(record_id)
        self._cache.pop(record_id, None)
        logger.info("Deleted weather record %s", record_id)
