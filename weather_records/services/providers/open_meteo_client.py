from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from weather_records.core.config import settings
from weather_records.core.errors import UpstreamUnavailable
from weather_records.schemas.records import Coordinates, DailyObservation, DateRange
from weather_records.services.formatting import format_number

logger = logging.getLogger(__name__)


# Same variable names on both endpoints so one normalizer handles both.
DAILY_VARIABLES = [
    "temperature_2m_max",
    "temperature_2m_min",
    "temperature_2m_mean",
    "relative_humidity_2m_mean",
    "wind_speed_10m_mean",
]


def describe_day(t_max: Optional[float], t_min: Optional[float]) -> str:
    high = format_number(t_max) if t_max is not None else "n/a"
    low = format_number(t_min) if t_min is not None else "n/a"
    return f"High: {high}°C, Low: {low}°C"


def _column(daily: Dict[str, Any], name: str, size: int) -> List[Optional[float]]:
    """Return the per-day array for `name`, padded with None when absent or short."""
    values = daily.get(name)
    if not isinstance(values, list):
        return [None] * size
    return [values[i] if i < len(values) else None for i in range(size)]


def normalize_daily(payload: Any, provider: str) -> List[DailyObservation]:
    """
    Map an Open-Meteo `daily` block into `DailyObservation` rows.

    The response holds parallel arrays indexed by day offset:

        {"daily": {"time": ["2024-01-01", ...],
                   "temperature_2m_mean": [3.4, ...], ...}}

    Humidity and wind are carried through as-is. When the mean temperature
    is missing for a day, the midpoint of max and min is used instead.

    Raises:
        UpstreamUnavailable: the payload has no usable `daily.time` array
            or a day has no temperature at all.
    """
    daily = payload.get("daily") if isinstance(payload, dict) else None
    if not isinstance(daily, dict) or not isinstance(daily.get("time"), list):
        raise UpstreamUnavailable(provider, "response has no daily series")

    days = daily["time"]
    size = len(days)
    t_max = _column(daily, "temperature_2m_max", size)
    t_min = _column(daily, "temperature_2m_min", size)
    t_mean = _column(daily, "temperature_2m_mean", size)
    humidity = _column(daily, "relative_humidity_2m_mean", size)
    wind = _column(daily, "wind_speed_10m_mean", size)

    observations: List[DailyObservation] = []
    for i, raw_day in enumerate(days):
        mean = t_mean[i]
        if mean is None:
            if t_max[i] is None or t_min[i] is None:
                raise UpstreamUnavailable(provider, f"no temperature for {raw_day}")
            mean = (t_max[i] + t_min[i]) / 2

        try:
            day = date.fromisoformat(str(raw_day))
        except ValueError as e:
            raise UpstreamUnavailable(provider, f"invalid day {raw_day!r}") from e

        observations.append(
            DailyObservation(
                date=day,
                mean_temperature_c=mean,
                description=describe_day(t_max[i], t_min[i]),
                humidity_percent=humidity[i],
                wind_speed_ms=wind[i],
            )
        )

    return observations


class OpenMeteoClient:
    """
    Daily aggregates client for an Open-Meteo time-series endpoint.

    The archive and forecast endpoints accept the same query parameters
    and answer with the same `daily` shape; subclasses only differ in the
    endpoint URL and the provider name used in errors.
    """

    PROVIDER = "open-meteo"

    def __init__(
        self,
        base_url: str,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        self.transport = transport

    @staticmethod
    def build_params(coordinates: Coordinates, sub_range: DateRange) -> Dict[str, Any]:
        return {
            "latitude": coordinates.latitude,
            "longitude": coordinates.longitude,
            "start_date": sub_range.start.isoformat(),
            "end_date": sub_range.end.isoformat(),
            "daily": ",".join(DAILY_VARIABLES),
            "wind_speed_unit": "ms",
            "timezone": "auto",
        }

    async def _get_json(self, params: Dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(self.base_url, params=params)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            logger.warning("%s answered HTTP %s", self.PROVIDER, e.response.status_code)
            raise UpstreamUnavailable(self.PROVIDER, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %s", self.PROVIDER, e)
            raise UpstreamUnavailable(self.PROVIDER, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise UpstreamUnavailable(self.PROVIDER, "response is not JSON") from e

    async def fetch(self, coordinates: Coordinates, sub_range: Optional[DateRange]) -> List[DailyObservation]:
        """
        Fetch daily observations for `sub_range` at `coordinates`.

        Returns an empty list without calling the provider when there is
        nothing to fetch.
        """
        if sub_range is None:
            return []

        logger.debug(
            "Fetching %s daily series %s..%s at (%s, %s)",
            self.PROVIDER,
            sub_range.start,
            sub_range.end,
            coordinates.latitude,
            coordinates.longitude,
        )
        payload = await self._get_json(self.build_params(coordinates, sub_range))
        return normalize_daily(payload, self.PROVIDER)


class ArchiveClient(OpenMeteoClient):
    """Historical archive (reanalysis), complete up to a few days ago."""

    PROVIDER = "archive"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or settings.archive_api_url, **kwargs)


class ForecastClient(OpenMeteoClient):
    """Forecast endpoint, used for the recent days the archive does not cover yet."""

    PROVIDER = "forecast"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or settings.forecast_api_url, **kwargs)
