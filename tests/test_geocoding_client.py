import httpx
import pytest

from weather_records.core.errors import GeocodingUnavailable
from weather_records.schemas.locations import LocationSuggestion
from weather_records.schemas.records import Coordinates
from weather_records.services.providers.geocoding_client import NominatimClient


def test_suggestion_to_location():
    suggestion = LocationSuggestion(place_id=7, display_name="Quito, Ecuador", lat="-0.2202", lon="-78.5123")
    location = suggestion.to_location()

    assert location.display_name == "Quito, Ecuador"
    assert location.coordinates == Coordinates(latitude=-0.2202, longitude=-78.5123)


@pytest.mark.asyncio
async def test_search_sends_query_and_limit():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = NominatimClient(base_url="https://nominatim.test", transport=httpx.MockTransport(handler))
    assert await client.search("  Lyon  ", limit=3) == []

    [request] = seen
    assert request.url.params["q"] == "Lyon"
    assert request.url.params["limit"] == "3"
    assert request.url.params["format"] == "json"


@pytest.mark.asyncio
async def test_reverse_without_display_name_fails():
    client = NominatimClient(
        base_url="https://nominatim.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"error": "Unable to geocode"})),
    )
    with pytest.raises(GeocodingUnavailable):
        await client.reverse(Coordinates(latitude=0, longitude=0))


@pytest.mark.asyncio
async def test_search_http_error_fails():
    client = NominatimClient(
        base_url="https://nominatim.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(429)),
    )
    with pytest.raises(GeocodingUnavailable):
        await client.search("Lyon")
