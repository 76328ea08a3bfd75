from typing import Union

from pydantic import BaseModel, ConfigDict

from weather_records.schemas.records import Coordinates, Location


class LocationSuggestion(BaseModel):
    """
    One forward-geocoding hit as returned by Nominatim.

    Nominatim sends coordinates as strings; they are parsed only when the
    suggestion is picked.
    """

    model_config = ConfigDict(extra="ignore")

    place_id: int
    display_name: str
    lat: Union[str, float]
    lon: Union[str, float]

    def to_location(self) -> Location:
        return Location(
            display_name=self.display_name,
            coordinates=Coordinates(latitude=float(self.lat), longitude=float(self.lon)),
        )
