import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RangeResponse(BaseModel):
    """Observations of every day of a range, concatenated in date order."""

    observations: List[Any]
    station_id: str = Field(alias="stationId")
    start: str
    end: str

    model_config = ConfigDict(populate_by_name=True)


class StoredObservation(BaseModel):
    """A `weather_data` row as stored."""

    id: int
    station_id: Optional[str] = None
    date: Optional[str] = None
    temp: Optional[float] = None
    dewpt: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gust: Optional[float] = None
    wind_dir: Optional[float] = None
    precip_rate: Optional[float] = None
    precip_total: Optional[float] = None
    solar_radiation: Optional[float] = None
    uv: Optional[float] = None
    obs_time_utc: Optional[str] = None
    obs_time_local: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)
