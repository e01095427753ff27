"""Ingestion subpackage.

Fetches PWS history from weather.com, normalizes observations and persists
them into the `weather_data` table.
"""

from .client import WundergroundClient
from .dates import expand_dates, parse_date
from .models import WeatherData, create_tables
from .storage import (
    extract_observations,
    normalize_observation,
    read_recent_observations,
    save_observations,
)

__all__ = [
    "WundergroundClient",
    "WeatherData",
    "create_tables",
    "expand_dates",
    "parse_date",
    "extract_observations",
    "normalize_observation",
    "read_recent_observations",
    "save_observations",
]
