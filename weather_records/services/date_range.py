from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, NamedTuple, Optional

from weather_records.core.config import settings
from weather_records.core.errors import FutureDate, InvertedRange, RangeTooLong
from weather_records.schemas.records import DateRange


@dataclass(frozen=True)
class RangePolicy:
    """
    Date range limits shared by validation and source splitting.

    - `max_days`: largest allowed `(end - start)` in days.
    - `archive_lag_days`: how far the historical archive lags behind today.
      Days after `today - archive_lag_days` are served by the forecast API.
    """

    max_days: int = 30
    archive_lag_days: int = 4

    @classmethod
    def from_settings(cls) -> "RangePolicy":
        return cls(max_days=settings.max_range_days, archive_lag_days=settings.archive_lag_days)


class SourceSplit(NamedTuple):
    archive: Optional[DateRange]
    forecast: Optional[DateRange]


class DateRangePreset(NamedTuple):
    label: str
    days: int


DATE_RANGE_PRESETS: List[DateRangePreset] = [
    DateRangePreset("Last 7 days", 7),
    DateRangePreset("Last 14 days", 14),
    DateRangePreset("Last 30 days", 30),
    DateRangePreset("Custom Range", 0),
]


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def validate(start: date, end: date, today: date, max_days: int = 30) -> DateRange:
    """
    Check a candidate start/end pair and return it as a `DateRange`.

    Rules are checked in order and the first failure wins:
    1. no date may be after `today` (`FutureDate`)
    2. `end - start` may not exceed `max_days` (`RangeTooLong`)
    3. `end` may not be before `start` (`InvertedRange`)
    """
    if start > today or end > today:
        raise FutureDate()

    if (end - start).days > max_days:
        raise RangeTooLong(max_days)

    if end < start:
        raise InvertedRange()

    return DateRange(start=start, end=end)


def archive_cutoff(today: date, lag_days: int = 4) -> date:
    """Last day the archive provider is trusted to have data for."""
    return today - timedelta(days=lag_days)


def split(date_range: DateRange, cutoff: date) -> SourceSplit:
    """
    Split a validated range between the archive and forecast providers.

    The archive part covers days up to and including `cutoff`, the
    forecast part covers the days after it. Either part is None when the
    range has no days on that side. Together they cover the input range
    exactly, without gaps or overlap.
    """
    archive = None
    if date_range.start <= cutoff:
        archive = DateRange(start=date_range.start, end=min(date_range.end, cutoff))

    forecast = None
    if date_range.end > cutoff:
        first_recent = cutoff + timedelta(days=1)
        forecast = DateRange(start=max(date_range.start, first_recent), end=date_range.end)

    return SourceSplit(archive=archive, forecast=forecast)


def preset_range(days: int, today: date) -> DateRange:
    """Range of the last `days` calendar days, ending today."""
    if days < 1:
        raise ValueError("A preset covers at least one day")
    return DateRange(start=today - timedelta(days=days - 1), end=today)
