from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable, List, Optional

from weather_records.core.errors import UpstreamUnavailable
from weather_records.schemas.records import Coordinates, DailyObservation, DateRange
from weather_records.services import date_range as ranges
from weather_records.services.date_range import RangePolicy
from weather_records.services.providers.open_meteo_client import ArchiveClient, ForecastClient, OpenMeteoClient

logger = logging.getLogger(__name__)


def merge(
    archive_observations: Iterable[DailyObservation],
    forecast_observations: Iterable[DailyObservation],
) -> List[DailyObservation]:
    """
    Concatenate both provider series and order them by day.

    The two series cover disjoint day ranges, so no de-duplication is
    needed; the sort does not rely on providers returning ordered rows.
    """
    return sorted([*archive_observations, *forecast_observations], key=lambda o: o.date)


def check_coverage(provider: str, sub_range: DateRange, observations: List[DailyObservation]) -> None:
    """
    Require exactly one observation for every day of `sub_range`.

    Raises:
        UpstreamUnavailable: a day is missing, repeated or outside the range.
    """
    returned = [o.date for o in observations]
    if sorted(returned) == list(sub_range.days()):
        return

    logger.warning(
        "%s returned %d rows (%d distinct) for %s..%s, expected %d",
        provider,
        len(returned),
        len(set(returned)),
        sub_range.start,
        sub_range.end,
        sub_range.day_count(),
    )
    raise UpstreamUnavailable(provider, f"incomplete series for {sub_range.start}..{sub_range.end}")


class HistoryService:
    """
    Historical series aggregation.

    Validates the requested range, splits it between the archive and the
    forecast provider, queries both concurrently and merges the results.
    The aggregation is all-or-nothing: if either provider fails or leaves a
    gap in its part of the range, `UpstreamUnavailable` propagates and no
    partial series is returned.
    """

    def __init__(
        self,
        archive: Optional[OpenMeteoClient] = None,
        forecast: Optional[OpenMeteoClient] = None,
        policy: Optional[RangePolicy] = None,
    ):
        self.archive = archive or ArchiveClient()
        self.forecast = forecast or ForecastClient()
        self.policy = policy or RangePolicy.from_settings()

    def validate(self, start: date, end: date, today: Optional[date] = None) -> DateRange:
        return ranges.validate(start, end, today or ranges.today_utc(), max_days=self.policy.max_days)

    @staticmethod
    async def _fetch_part(
        client: OpenMeteoClient,
        coordinates: Coordinates,
        sub_range: DateRange,
    ) -> List[DailyObservation]:
        observations = await client.fetch(coordinates, sub_range)
        check_coverage(client.PROVIDER, sub_range, observations)
        return observations

    async def fetch_range(
        self,
        coordinates: Coordinates,
        date_range: DateRange,
        today: Optional[date] = None,
    ) -> List[DailyObservation]:
        """
        Aggregate an already validated range.
        """
        cutoff = ranges.archive_cutoff(today or ranges.today_utc(), self.policy.archive_lag_days)
        parts = ranges.split(date_range, cutoff)

        calls = []
        if parts.archive is not None:
            calls.append(self._fetch_part(self.archive, coordinates, parts.archive))
        if parts.forecast is not None:
            calls.append(self._fetch_part(self.forecast, coordinates, parts.forecast))

        # Parts are contiguous, archive first; merge() re-sorts regardless.
        results = await asyncio.gather(*calls)
        archive_obs = results[0] if parts.archive is not None else []
        forecast_obs = results[-1] if parts.forecast is not None else []

        return merge(archive_obs, forecast_obs)

    async def fetch(
        self,
        coordinates: Coordinates,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> List[DailyObservation]:
        """
        Validate `start`/`end` and return the merged daily series.

        Raises:
            DateRangeError: the range is not allowed (no provider is called).
            UpstreamUnavailable: a provider call failed or returned a series
                that does not cover its part of the range day by day.
        """
        today = today or ranges.today_utc()
        date_range = self.validate(start, end, today)
        return await self.fetch_range(coordinates, date_range, today)
