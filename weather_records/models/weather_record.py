from datetime import date, datetime
from typing import Optional

from sqlalchemy import JSON, Date, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from weather_records.models.base import Base


class WeatherRecordRow(Base):
    """
    Stored weather record.

    A record is a location, a date range and the daily observations that
    were aggregated for it. Observations are kept as a JSON list of
    camelCase objects because they are always read and replaced as a whole.
    """

    __tablename__ = "weather_records"

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Opaque record identifier (UUID4 hex) assigned on create",
    )

    location_name: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="Display name of the location",
    )

    latitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Latitude in decimal degrees",
    )

    longitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Longitude in decimal degrees",
    )

    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First calendar day of the range (inclusive)",
    )

    end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last calendar day of the range (inclusive)",
    )

    observations: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Daily observations ordered by date",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Creation timestamp (UTC), kept across updates",
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp of the last update (UTC)",
    )
