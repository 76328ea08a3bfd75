from __future__ import annotations

import datetime as dt
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model for the record wire format.

    Attributes are snake_case in Python and camelCase on the wire
    (e.g. `date_range` <-> `dateRange`). Both names are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class Location(CamelModel):
    """
    A named place. Replacing the location of a draft invalidates its series.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="Human-readable place name")
    coordinates: Coordinates


class DateRange(CamelModel):
    """
    Inclusive range of calendar days. Dates carry no time component.
    """

    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date

    def days(self) -> Iterator[dt.date]:
        """Yield every calendar day from start to end, inclusive."""
        day = self.start
        while day <= self.end:
            yield day
            day += dt.timedelta(days=1)

    def day_count(self) -> int:
        return (self.end - self.start).days + 1


class DailyObservation(CamelModel):
    """
    Normalized daily aggregate for one calendar day at one location.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    mean_temperature_c: float = Field(..., description="Daily mean temperature in °C")
    description: str = Field(..., description='Caption such as "High: 12.3°C, Low: 4°C"')
    humidity_percent: Optional[float] = Field(default=None, description="Mean relative humidity (%)")
    wind_speed_ms: Optional[float] = Field(default=None, description="Mean wind speed (m/s)")


class WeatherRecordIn(CamelModel):
    """
    Request body for creating or replacing a weather record.
    """

    location: Location
    date_range: DateRange
    observations: List[DailyObservation] = Field(default_factory=list)


class WeatherRecord(WeatherRecordIn):
    """
    A weather record, either a draft (`id is None`) or a persisted one.

    `id` and `created_at` are assigned by the persistence API.
    """

    id: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def to_payload(self) -> dict:
        """Body sent to the persistence API (no id, no timestamps)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id", "created_at"})
