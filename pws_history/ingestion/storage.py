from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import WeatherData, to_store_error

logger = structlog.get_logger()

# column -> key inside the observation's "metric" sub-object
METRIC_FIELDS: Dict[str, str] = {
    "temp": "temp",
    "dewpt": "dewpt",
    "pressure": "pressure",
    "wind_speed": "windSpeed",
    "wind_gust": "windGust",
    "precip_rate": "precipRate",
    "precip_total": "precipTotal",
}

# column -> key at the top level of the observation
OBSERVATION_FIELDS: Dict[str, str] = {
    "humidity": "humidity",
    "wind_dir": "winddir",
    "solar_radiation": "solarRadiation",
    "uv": "uv",
    "obs_time_utc": "obsTimeUtc",
    "obs_time_local": "obsTimeLocal",
}


def extract_observations(payload: Any) -> List[Any]:
    """Return the `observations` list of an upstream payload.

    An absent field, or one that is not a list, counts as no observations.
    """
    if not isinstance(payload, Mapping):
        return []
    observations = payload.get("observations")
    if not isinstance(observations, list):
        return []
    return observations


def normalize_observation(obs: Any) -> Dict[str, Optional[Any]]:
    """Map one raw observation onto the `weather_data` metric columns.

    Every column is present in the result; missing upstream fields are None.
    """
    if not isinstance(obs, Mapping):
        obs = {}
    metric = obs.get("metric")
    if not isinstance(metric, Mapping):
        metric = {}

    payload: Dict[str, Optional[Any]] = {}
    for column, key in METRIC_FIELDS.items():
        payload[column] = metric.get(key)
    for column, key in OBSERVATION_FIELDS.items():
        payload[column] = obs.get(key)
    return payload


def save_observations(engine, station_id: str, date: str, payload: Any) -> int:
    """Insert every observation of an upstream payload into `weather_data`.

    Parameters
    ----------
    engine : sqlalchemy.Engine
        Database engine.
    station_id : str
        Station the payload was fetched for.
    date : str
        Requested YYYYMMDD day, stored on every row.
    payload : Any
        Parsed upstream JSON.

    Returns
    -------
    int
        Number of rows written, in upstream order. 0 when the payload holds
        no observations, in which case the store is not touched.

    Raises
    ------
    StoreError
        On any database failure.
    """
    observations = extract_observations(payload)
    if not observations:
        return 0

    count = 0
    try:
        with Session(engine) as session:
            for obs in observations:
                session.add(WeatherData(station_id=station_id, date=date, **normalize_observation(obs)))
                # flush per row keeps one INSERT per observation, in order
                session.flush()
                count += 1
            session.commit()
    except SQLAlchemyError as e:
        raise to_store_error(e) from e

    logger.info("observations_saved", station_id=station_id, date=date, count=count)
    return count


def read_recent_observations(engine, limit: int) -> List[WeatherData]:
    """Read the most recently observed rows, newest `obs_time_local` first."""
    stmt = select(WeatherData).order_by(WeatherData.obs_time_local.desc(), WeatherData.id.desc()).limit(limit)
    try:
        with Session(engine, expire_on_commit=False) as session:
            return list(session.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        raise to_store_error(e) from e
