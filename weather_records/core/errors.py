from __future__ import annotations

from typing import Optional


class WeatherRecordsError(Exception):
    """
    Base class for all domain errors raised by the application.

    Every subclass carries a user-facing `message` that routers and
    clients can surface as is.
    """

    message = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


# ---------------------------------------------------------------------
# Date range validation
# ---------------------------------------------------------------------

class DateRangeError(WeatherRecordsError):
    """A requested start/end combination is not allowed."""


class FutureDate(DateRangeError):
    message = "Cannot select future dates"


class RangeTooLong(DateRangeError):
    message = "Date range cannot exceed 30 days"

    def __init__(self, max_days: int = 30):
        self.max_days = max_days
        super().__init__(f"Date range cannot exceed {max_days} days")


class InvertedRange(DateRangeError):
    message = "End date must be after start date"


# ---------------------------------------------------------------------
# Upstream weather providers
# ---------------------------------------------------------------------

class UpstreamUnavailable(WeatherRecordsError):
    """An archive or forecast provider call failed; the aggregation is aborted."""

    message = "Failed to fetch weather data"

    def __init__(self, provider: str, detail: Optional[str] = None):
        self.provider = provider
        self.detail = detail
        super().__init__()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.provider}: {self.detail})"
        return f"{self.message} ({self.provider})"


class GeocodingUnavailable(WeatherRecordsError):
    message = "Failed to search location"


# ---------------------------------------------------------------------
# Records persistence
# ---------------------------------------------------------------------

class IncompleteRecord(WeatherRecordsError):
    message = "Please select a valid location and ensure weather data is loaded"


class PersistenceUnavailable(WeatherRecordsError):
    message = "Failed to save weather record"


class RecordNotFound(WeatherRecordsError):
    message = "Weather record not found"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Weather record {record_id} not found")
