from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from weather_records.core.dependencies import get_history_service
from weather_records.core.errors import DateRangeError, UpstreamUnavailable
from weather_records.schemas.history import DateRangePresetOut, HistoryResponse
from weather_records.schemas.records import Coordinates
from weather_records.services import date_range as ranges
from weather_records.services.history_service import HistoryService

router = APIRouter(prefix="/history", tags=["History"])


@router.get(
    "",
    response_model=HistoryResponse,
    summary="Historical daily series for a location",
    description=(
        "Aggregates daily mean temperature, humidity and wind speed for a date range.\n\n"
        "- Days up to four days ago come from the historical archive, newer days from the forecast API.\n"
        "- Dates may not be in the future and the range may not exceed 30 days.\n"
        "- If either provider fails, no partial series is returned."
    ),
)
async def get_history(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    start_date: date = Query(..., description="Start date (YYYY-MM-DD)"),
    end_date: date = Query(..., description="End date (YYYY-MM-DD)"),
    service: HistoryService = Depends(get_history_service),
):
    coordinates = Coordinates(latitude=latitude, longitude=longitude)
    today = ranges.today_utc()

    try:
        date_range = service.validate(start_date, end_date, today)
        observations = await service.fetch_range(coordinates, date_range, today)
    except DateRangeError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=502, detail=e.message)

    return HistoryResponse(
        coordinates=coordinates,
        date_range=date_range,
        observations=observations,
        total=len(observations),
    )


@router.get(
    "/presets",
    response_model=List[DateRangePresetOut],
    summary="Date range presets",
    description="Shortcuts for the most common ranges, resolved against today (UTC).",
)
def list_presets():
    today = ranges.today_utc()
    out = []
    for preset in ranges.DATE_RANGE_PRESETS:
        if preset.days == 0:
            out.append(DateRangePresetOut(label=preset.label, days=0))
            continue
        resolved = ranges.preset_range(preset.days, today)
        out.append(
            DateRangePresetOut(label=preset.label, days=preset.days, start=resolved.start, end=resolved.end)
        )
    return out
