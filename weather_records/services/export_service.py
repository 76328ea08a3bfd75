from __future__ import annotations

import json
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from weather_records.schemas.records import DailyObservation, WeatherRecord
from weather_records.services.formatting import format_number

CSV_HEADER = "Date,Temperature (°C),Description,Humidity (%),Wind Speed (m/s)"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv",
}


class ExportDocument(NamedTuple):
    content: bytes
    filename: str
    media_type: str


def escape_csv_field(text: str) -> str:
    """
    Quote a CSV field when it contains a comma, a double quote or a newline.

    Inner double quotes are doubled. Other fields are returned unchanged.
    """
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _one_decimal(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 1)


def _one_decimal_text(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.1f}"


def _created_day(record: WeatherRecord) -> date:
    # unsaved drafts have no creation time yet
    if record.created_at is None:
        return datetime.now(timezone.utc).date()
    return record.created_at.date()


def export_filename(record: WeatherRecord, fmt: ExportFormat) -> str:
    return f"weather-record-{_created_day(record).isoformat()}.{fmt.value}"


# ---------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------

def to_json_document(record: WeatherRecord) -> Dict[str, Any]:
    return {
        "location": record.location.model_dump(mode="json", by_alias=True),
        "dateRange": {
            "start": record.date_range.start.isoformat(),
            "end": record.date_range.end.isoformat(),
        },
        "observations": [
            {
                "date": o.date.isoformat(),
                "meanTemperatureC": _one_decimal(o.mean_temperature_c),
                "description": o.description,
                "humidityPercent": _one_decimal(o.humidity_percent),
                "windSpeedMs": _one_decimal(o.wind_speed_ms),
            }
            for o in record.observations
        ],
        "createdAt": _created_day(record).isoformat(),
    }


def decode_json(content: bytes) -> WeatherRecord:
    """
    Rebuild a record from a JSON export.

    Values come back rounded to one decimal; `createdAt` is the export's
    day at midnight UTC. The record has no id.
    """
    data = json.loads(content.decode("utf-8"))
    created = date.fromisoformat(data["createdAt"])
    return WeatherRecord.model_validate(
        {
            "location": data["location"],
            "dateRange": data["dateRange"],
            "observations": data["observations"],
            "createdAt": datetime.combine(created, time.min, tzinfo=timezone.utc),
        }
    )


# ---------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------

def _csv_row(observation: DailyObservation) -> str:
    fields = [
        observation.date.isoformat(),
        _one_decimal_text(observation.mean_temperature_c),
        observation.description,
        _one_decimal_text(observation.humidity_percent),
        _one_decimal_text(observation.wind_speed_ms),
    ]
    return ",".join(escape_csv_field(f) for f in fields)


def to_csv_text(record: WeatherRecord) -> str:
    """
    Render a record as CSV with a commented metadata preamble:

        # Location: Berlin
        # Latitude: 52.52
        # Longitude: 13.41
        # Date Range: 2024-01-01 to 2024-01-10

        Date,Temperature (°C),Description,Humidity (%),Wind Speed (m/s)
        2024-01-01,3.4,"High: 5°C, Low: 1.2°C",80.0,4.1
    """
    coordinates = record.location.coordinates
    start = record.date_range.start.isoformat()
    end = record.date_range.end.isoformat()

    lines: List[str] = [
        f"# Location: {escape_csv_field(record.location.display_name)}",
        f"# Latitude: {escape_csv_field(format_number(coordinates.latitude))}",
        f"# Longitude: {escape_csv_field(format_number(coordinates.longitude))}",
        f"# Date Range: {escape_csv_field(f'{start} to {end}')}",
        "",
        CSV_HEADER,
    ]
    lines.extend(_csv_row(o) for o in record.observations)
    return "\n".join(lines)


def encode(record: WeatherRecord, fmt: ExportFormat | str) -> ExportDocument:
    """
    Encode a record as a downloadable JSON or CSV document.
    """
    fmt = ExportFormat(fmt)

    if fmt is ExportFormat.JSON:
        text = json.dumps(to_json_document(record), indent=2, ensure_ascii=False)
    else:
        text = to_csv_text(record)

    return ExportDocument(
        content=text.encode("utf-8"),
        filename=export_filename(record, fmt),
        media_type=MEDIA_TYPES[fmt],
    )
