import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from weather_records.core.db import get_db

RECORD = {
    "location": {"displayName": "Oslo, Norway", "coordinates": {"latitude": 59.91, "longitude": 10.75}},
    "dateRange": {"start": "2024-02-01", "end": "2024-02-01"},
    "observations": [{"date": "2024-02-01", "meanTemperatureC": -4.5, "description": "High: -1°C, Low: -8°C"}],
}


@pytest.mark.asyncio
async def test_health_ok(test_app):
    """
    `/health` answers 200 with the service name and range policy, without
    touching the database.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/health")

    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["service"] == "weather-records"
    assert data["maxRangeDays"] == 30
    assert data["archiveLagDays"] == 4


@pytest.mark.asyncio
async def test_health_db_counts_records(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        empty = await ac.get("/health/db")
        await ac.post("/records", json=RECORD)
        r = await ac.get("/health/db")

    assert empty.json() == {"status": "ok", "db": "ok", "records": 0}
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "db": "ok", "records": 1}


@pytest.mark.asyncio
async def test_health_db_without_schema_is_503(test_app):
    """
    A database where the records table was never created is reported as
    unavailable instead of failing with a 500.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    async def override_get_db():
        async with AsyncSession(engine) as session:
            yield session

    test_app.dependency_overrides[get_db] = override_get_db
    try:
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            r = await ac.get("/health/db")
    finally:
        await engine.dispose()

    assert r.status_code == 503
    assert r.json()["detail"] == "Records storage unavailable"
