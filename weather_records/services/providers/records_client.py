from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from weather_records.core.config import settings
from weather_records.core.errors import PersistenceUnavailable, RecordNotFound
from weather_records.schemas.records import WeatherRecord

logger = logging.getLogger(__name__)


class RecordsClient:
    """
    HTTP client for the records persistence API.

    Endpoints:
    - GET    /records
    - POST   /records
    - PUT    /records/{id}
    - DELETE /records/{id}

    Bodies are camelCase `WeatherRecord` JSON.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.records_api_url).rstrip("/")
        self.timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        self.transport = transport

    async def _request(self, method: str, path: str, record_id: Optional[str] = None, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.request(method, url, **kwargs)
                if r.status_code == 404 and record_id is not None:
                    raise RecordNotFound(record_id)
                r.raise_for_status()
                if r.status_code == 204 or not r.content:
                    return None
                return r.json()
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s answered HTTP %s", method, url, e.response.status_code)
            raise PersistenceUnavailable() from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise PersistenceUnavailable() from e

    async def list_records(self) -> List[WeatherRecord]:
        data = await self._request("GET", "/records")
        return [WeatherRecord.model_validate(item) for item in data or []]

    async def create_record(self, draft: WeatherRecord) -> WeatherRecord:
        data = await self._request("POST", "/records", json=draft.to_payload())
        return WeatherRecord.model_validate(data)

    async def update_record(self, record_id: str, draft: WeatherRecord) -> WeatherRecord:
        data = await self._request("PUT", f"/records/{record_id}", record_id=record_id, json=draft.to_payload())
        return WeatherRecord.model_validate(data)

    async def delete_record(self, record_id: str) -> None:
        await self._request("DELETE", f"/records/{record_id}", record_id=record_id)
