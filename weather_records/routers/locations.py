from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from weather_records.core.dependencies import get_geocoding_client
from weather_records.core.errors import GeocodingUnavailable
from weather_records.schemas.locations import LocationSuggestion
from weather_records.schemas.records import Coordinates, Location
from weather_records.services.providers.geocoding_client import NominatimClient

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get(
    "/search",
    response_model=List[LocationSuggestion],
    summary="Search locations",
    description="Forward geocoding through Nominatim. Queries shorter than 3 characters return an empty list.",
)
async def search_locations(
    q: str = Query(..., description="Free-text place query"),
    limit: int = Query(default=5, ge=1, le=20),
    client: NominatimClient = Depends(get_geocoding_client),
):
    try:
        return await client.search(q, limit=limit)
    except GeocodingUnavailable as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.get(
    "/reverse",
    response_model=Location,
    summary="Reverse geocode coordinates",
)
async def reverse_location(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    client: NominatimClient = Depends(get_geocoding_client),
):
    try:
        return await client.reverse(Coordinates(latitude=latitude, longitude=longitude))
    except GeocodingUnavailable as e:
        raise HTTPException(status_code=502, detail=e.message)
