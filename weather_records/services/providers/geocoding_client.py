from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from weather_records.core.config import settings
from weather_records.core.errors import GeocodingUnavailable
from weather_records.schemas.locations import LocationSuggestion
from weather_records.schemas.records import Coordinates, Location

logger = logging.getLogger(__name__)


class NominatimClient:
    """
    OpenStreetMap Nominatim client.

    Endpoints used:
    - /search?q=...&format=json&limit=N  -> list of {place_id, display_name, lat, lon}
    - /reverse?lat=...&lon=...&format=json -> {display_name, ...}

    Nominatim rejects requests without an identifying User-Agent.
    """

    MIN_QUERY_LENGTH = 3

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.geocoding_api_url).rstrip("/")
        self.user_agent = user_agent or settings.geocoding_user_agent
        self.timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        self.transport = transport

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(
                    f"{self.base_url}{path}",
                    params={**params, "format": "json"},
                    headers={"accept": "application/json", "user-agent": self.user_agent},
                )
                r.raise_for_status()
                return r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geocoding request %s failed: %s", path, e)
            raise GeocodingUnavailable() from e

    async def search(self, query: str, limit: int = 5) -> List[LocationSuggestion]:
        """
        Forward geocoding. Queries shorter than three characters return no
        suggestions without calling Nominatim.
        """
        query = query.strip()
        if len(query) < self.MIN_QUERY_LENGTH:
            return []

        data = await self._get_json("/search", {"q": query, "limit": limit})
        if not isinstance(data, list):
            return []
        return [LocationSuggestion.model_validate(item) for item in data]

    async def reverse(self, coordinates: Coordinates) -> Location:
        data = await self._get_json(
            "/reverse",
            {"lat": coordinates.latitude, "lon": coordinates.longitude},
        )
        name = data.get("display_name") if isinstance(data, dict) else None
        if not name:
            raise GeocodingUnavailable("Unable to find location based on coordinates")
        return Location(display_name=name, coordinates=coordinates)
