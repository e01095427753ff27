from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import structlog

from ..errors import StoreError

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for ingestion models."""


class WeatherData(Base):
    """One PWS observation as fetched from the history API.

    `date` is the YYYYMMDD day the observation was requested under, which is
    not necessarily the day of `obs_time_local`. Units are metric:
    - temp, dewpt: Celsius
    - humidity: percent (0-100)
    - pressure: hectopascals
    - wind_speed, wind_gust: km/h
    - wind_dir: degrees
    - precip_rate: mm/h, precip_total: mm
    - solar_radiation: W/m2

    There is no uniqueness constraint: ingesting the same station and day
    twice stores every observation twice.
    """

    __tablename__ = "weather_data"
    __table_args__ = (
        Index("idx_weather_date", "date"),
        Index("idx_weather_station", "station_id"),
        Index("idx_weather_obs_local", "obs_time_local"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station_id: Mapped[Optional[str]] = mapped_column(String)
    date: Mapped[Optional[str]] = mapped_column(String)

    temp: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    dewpt: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pressure: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wind_speed: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wind_gust: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wind_dir: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    precip_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    precip_total: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    solar_radiation: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    uv: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    obs_time_utc: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    obs_time_local: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )


def to_store_error(exc: SQLAlchemyError) -> StoreError:
    """Wrap a SQLAlchemy failure without leaking its SQL text and parameters.

    The full error, statement included, goes to the log only.
    """
    logger.error("store_failed", error_type=type(exc).__name__, error=str(exc))
    orig = getattr(exc, "orig", None)
    return StoreError(str(orig) if orig is not None else type(exc).__name__)


def create_tables(engine) -> None:
    """Create the `weather_data` table and its indexes if they do not exist.

    Parameters
    ----------
    engine : sqlalchemy.Engine
        SQLAlchemy engine for the target database.

    Raises
    ------
    StoreError
        If the database cannot be opened or the DDL fails.
    """
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise to_store_error(e) from e
