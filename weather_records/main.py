from contextlib import asynccontextmanager

from fastapi import FastAPI

from weather_records.core.config import settings
from weather_records.core.init_db import init_db
from weather_records.core.logging_config import configure_logging
from weather_records.routers.health import router as health_router
from weather_records.routers.history import router as history_router
from weather_records.routers.locations import router as locations_router
from weather_records.routers.records import router as records_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: creates the records tables on startup.
    """
    await init_db()
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Registers the health, records (persistence and export), history
    (aggregation) and locations (geocoding) routers.
    """
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description="Historical weather records: aggregation, storage and export",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(health_router)
    app.include_router(records_router)
    app.include_router(history_router)
    app.include_router(locations_router)

    return app


# Application entry point
app = create_app()
