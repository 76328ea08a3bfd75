from weather_records.models.base import Base
from weather_records.models.weather_record import WeatherRecordRow

__all__ = ["Base", "WeatherRecordRow"]
