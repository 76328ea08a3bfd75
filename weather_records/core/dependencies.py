from weather_records.services.history_service import HistoryService
from weather_records.services.providers.geocoding_client import NominatimClient


def get_history_service() -> HistoryService:
    """
    FastAPI dependency returning the aggregation service configured from settings.

    Tests override it with a service built on mock transports.
    """
    return HistoryService()


def get_geocoding_client() -> NominatimClient:
    return NominatimClient()
