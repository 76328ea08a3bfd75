from datetime import date
from typing import List, Optional

from pydantic import Field

from weather_records.schemas.records import CamelModel, Coordinates, DailyObservation, DateRange


class HistoryResponse(CamelModel):
    """
    Response payload for an aggregated historical series.
    """

    coordinates: Coordinates
    date_range: DateRange
    observations: List[DailyObservation] = Field(default_factory=list)
    total: int


class DateRangePresetOut(CamelModel):
    """
    A selectable date range shortcut resolved against today.

    The custom entry has `days == 0` and no resolved dates.
    """

    label: str
    days: int
    start: Optional[date] = None
    end: Optional[date] = None
