from datetime import timedelta

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from weather_records.core.dependencies import get_geocoding_client, get_history_service
from weather_records.services.date_range import today_utc
from weather_records.services.providers.geocoding_client import NominatimClient


@pytest.fixture
def history_app(test_app, upstream):
    test_app.dependency_overrides[get_history_service] = lambda: upstream.history_service()
    return test_app


@pytest.mark.asyncio
async def test_history_returns_merged_series(history_app, upstream):
    today = today_utc()
    start = today - timedelta(days=9)

    transport = ASGITransport(app=history_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get(
            "/history",
            params={
                "latitude": 52.52,
                "longitude": 13.41,
                "start_date": start.isoformat(),
                "end_date": today.isoformat(),
            },
        )

    assert r.status_code == 200, r.text
    data = r.json()
    assert data["total"] == 10
    assert data["dateRange"] == {"start": start.isoformat(), "end": today.isoformat()}
    dates = [o["date"] for o in data["observations"]]
    assert dates == sorted(dates)
    assert {c[0] for c in upstream.calls} == {"archive.test", "forecast.test"}


@pytest.mark.asyncio
async def test_history_rejects_future_dates(history_app, upstream):
    tomorrow = today_utc() + timedelta(days=1)

    transport = ASGITransport(app=history_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get(
            "/history",
            params={
                "latitude": 52.52,
                "longitude": 13.41,
                "start_date": tomorrow.isoformat(),
                "end_date": tomorrow.isoformat(),
            },
        )

    assert r.status_code == 422
    assert r.json()["detail"] == "Cannot select future dates"
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_history_provider_failure_is_502(history_app, upstream):
    upstream.failing.add("archive.test")
    today = today_utc()

    transport = ASGITransport(app=history_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get(
            "/history",
            params={
                "latitude": 52.52,
                "longitude": 13.41,
                "start_date": (today - timedelta(days=20)).isoformat(),
                "end_date": today.isoformat(),
            },
        )

    assert r.status_code == 502
    assert r.json()["detail"] == "Failed to fetch weather data"


@pytest.mark.asyncio
async def test_history_incomplete_series_is_502(history_app, upstream):
    upstream.tamper["forecast.test"] = lambda days: days[1:]
    today = today_utc()

    transport = ASGITransport(app=history_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get(
            "/history",
            params={
                "latitude": 52.52,
                "longitude": 13.41,
                "start_date": (today - timedelta(days=2)).isoformat(),
                "end_date": today.isoformat(),
            },
        )

    assert r.status_code == 502
    assert r.json()["detail"] == "Failed to fetch weather data"


@pytest.mark.asyncio
async def test_history_presets(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/history/presets")

    assert r.status_code == 200
    data = r.json()
    assert [p["label"] for p in data] == ["Last 7 days", "Last 14 days", "Last 30 days", "Custom Range"]
    assert data[0]["end"] == today_utc().isoformat()
    assert data[-1]["start"] is None


# ---------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------

def nominatim_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/search":
        assert request.headers["user-agent"] == "weather-records-tests"
        return httpx.Response(
            200,
            json=[
                {"place_id": 1, "display_name": "Berlin, Germany", "lat": "52.5170365", "lon": "13.3888599"},
                {"place_id": 2, "display_name": "Berlin, NH, USA", "lat": "44.4689", "lon": "-71.1851"},
            ],
        )
    if request.url.path == "/reverse":
        return httpx.Response(200, json={"display_name": "Mitte, Berlin, Germany"})
    return httpx.Response(404)


@pytest.fixture
def geo_app(test_app):
    test_app.dependency_overrides[get_geocoding_client] = lambda: NominatimClient(
        base_url="https://nominatim.test",
        user_agent="weather-records-tests",
        transport=httpx.MockTransport(nominatim_handler),
    )
    return test_app


@pytest.mark.asyncio
async def test_search_locations(geo_app):
    transport = ASGITransport(app=geo_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/locations/search", params={"q": "Berlin"})
        short = await ac.get("/locations/search", params={"q": "Be"})

    assert r.status_code == 200
    assert [x["display_name"] for x in r.json()] == ["Berlin, Germany", "Berlin, NH, USA"]
    assert short.json() == []


@pytest.mark.asyncio
async def test_reverse_location(geo_app):
    transport = ASGITransport(app=geo_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/locations/reverse", params={"latitude": 52.52, "longitude": 13.41})

    assert r.status_code == 200
    assert r.json() == {
        "displayName": "Mitte, Berlin, Germany",
        "coordinates": {"latitude": 52.52, "longitude": 13.41},
    }
