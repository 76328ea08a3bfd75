from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings.

    Values are loaded from environment variables and optionally from a
    `.env` file. Environment variables take precedence over `.env` values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------
    # Application settings
    # ---------------------------------------------------------------------

    app_name: str = Field(
        default="weather-records",
        alias="APP_NAME",
        description="Application name displayed in logs and API documentation",
    )

    environment: str = Field(
        default="local",
        alias="ENVIRONMENT",
        description="Runtime environment (local, dev, prod)",
    )

    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # ---------------------------------------------------------------------
    # Database settings
    # ---------------------------------------------------------------------

    database_url: str = Field(
        default="sqlite+aiosqlite:///./weather_records.db",
        alias="DATABASE_URL",
        description="SQLAlchemy async connection URL for the records store",
    )

    # ---------------------------------------------------------------------
    # External services
    # ---------------------------------------------------------------------

    archive_api_url: str = Field(
        default="https://archive-api.open-meteo.com/v1/archive",
        alias="ARCHIVE_API_URL",
        description="Open-Meteo historical archive endpoint",
    )

    forecast_api_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="FORECAST_API_URL",
        description="Open-Meteo forecast endpoint, used for the most recent days",
    )

    geocoding_api_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        alias="GEOCODING_API_URL",
        description="Nominatim base URL for search and reverse geocoding",
    )

    geocoding_user_agent: str = Field(
        default="weather-records/0.1",
        alias="GEOCODING_USER_AGENT",
        description="User-Agent header required by the Nominatim usage policy",
    )

    records_api_url: str = Field(
        default="http://localhost:8000",
        alias="RECORDS_API_URL",
        description="Base URL of the records persistence API used by the record store",
    )

    http_timeout_s: float = Field(
        default=30.0,
        alias="HTTP_TIMEOUT_S",
        description="Timeout in seconds for outgoing HTTP requests",
    )

    # ---------------------------------------------------------------------
    # Date range policy
    # ---------------------------------------------------------------------

    archive_lag_days: int = Field(
        default=4,
        alias="ARCHIVE_LAG_DAYS",
        description="Days the historical archive lags behind today; newer days come from the forecast API",
    )

    max_range_days: int = Field(
        default=30,
        alias="MAX_RANGE_DAYS",
        description="Maximum allowed difference in days between start and end date",
    )


# Singleton settings instance
settings = Settings()
