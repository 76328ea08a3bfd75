from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Set

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from weather_records.core.db import get_db
from weather_records.main import app
from weather_records.models import Base
from weather_records.services.date_range import RangePolicy
from weather_records.services.history_service import HistoryService
from weather_records.services.providers.open_meteo_client import ArchiveClient, ForecastClient
from weather_records.services.providers.records_client import RecordsClient

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

ARCHIVE_URL = "https://archive.test/v1/archive"
FORECAST_URL = "https://forecast.test/v1/forecast"


@pytest_asyncio.fixture
async def test_engine():
    """
    In-memory SQLite async engine with all tables created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """
    Provide a fresh AsyncSession for each test.
    """
    TestingSessionLocal = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def test_app(db_session):
    """
    Return the FastAPI app with get_db overridden to use the test session.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def records_client(test_app):
    """RecordsClient talking to the test app in-process."""
    return RecordsClient(base_url="http://test", transport=ASGITransport(app=test_app))


# ---------------------------------------------------------------------
# Fake Open-Meteo upstreams
# ---------------------------------------------------------------------

def make_daily_payload(start: date, end: date, reverse: bool = False) -> dict:
    """Open-Meteo style `daily` block with one entry per day from start to end."""
    days = []
    d = start
    while d <= end:
        days.append(d)
        d += timedelta(days=1)
    if reverse:
        days.reverse()
    return daily_payload(days)


def daily_payload(days: List[date]) -> dict:
    """Open-Meteo style `daily` block for exactly the given days, in order."""
    return {
        "latitude": 52.52,
        "longitude": 13.41,
        "daily_units": {"time": "iso8601", "temperature_2m_mean": "°C"},
        "daily": {
            "time": [x.isoformat() for x in days],
            "temperature_2m_max": [10.0 + x.day for x in days],
            "temperature_2m_min": [x.day - 0.5 for x in days],
            "temperature_2m_mean": [5.04 + x.day for x in days],
            "relative_humidity_2m_mean": [70 + x.day for x in days],
            "wind_speed_10m_mean": [3.25 for _ in days],
        },
    }


class FakeUpstream:
    """
    Serves both Open-Meteo endpoints from one MockTransport and records the
    requested sub-ranges per provider host.

    `tamper` maps a host to a function applied to the list of days it
    answers with, to simulate providers that skip or repeat days.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.failing: Set[str] = set()
        self.tamper: Dict[str, Callable[[List[date]], List[date]]] = {}
        self.reverse = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        start = date.fromisoformat(request.url.params["start_date"])
        end = date.fromisoformat(request.url.params["end_date"])
        self.calls.append((host, start, end))

        if host in self.failing:
            return httpx.Response(503, json={"error": True, "reason": "unavailable"})

        payload = make_daily_payload(start, end, reverse=self.reverse)
        if host in self.tamper:
            days = [date.fromisoformat(x) for x in payload["daily"]["time"]]
            payload = daily_payload(self.tamper[host](days))
        return httpx.Response(200, json=payload)

    def calls_to(self, host: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == host]

    def history_service(self, policy: Optional[RangePolicy] = None) -> HistoryService:
        transport = httpx.MockTransport(self.handler)
        return HistoryService(
            archive=ArchiveClient(ARCHIVE_URL, transport=transport),
            forecast=ForecastClient(FORECAST_URL, transport=transport),
            policy=policy or RangePolicy(),
        )


@pytest.fixture
def upstream():
    return FakeUpstream()
