from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .api.main import make_engine, run
from .config import AppSettings
from .ingestion.client import WundergroundClient
from .ingestion.models import WeatherData, create_tables
from .logging import init_logging
from .services.history_service import HistoryService


def fetch_db_stats(engine, station_ids: Optional[Sequence[str]] = None) -> Tuple[int, pd.DataFrame]:
    """Return total row count and per-station stats."""
    create_tables(engine)

    with Session(engine) as session:
        total_stmt = select(func.count()).select_from(WeatherData)
        stats_stmt = select(
            WeatherData.station_id.label("station_id"),
            func.count().label("rows"),
            func.min(WeatherData.obs_time_local).label("first_obs_local"),
            func.max(WeatherData.obs_time_local).label("last_obs_local"),
        ).select_from(WeatherData)
        if station_ids:
            cond = WeatherData.station_id.in_(list(station_ids))
            total_stmt = total_stmt.where(cond)
            stats_stmt = stats_stmt.where(cond)
        stats_stmt = stats_stmt.group_by(WeatherData.station_id).order_by(func.count().desc())

        total = int(session.execute(total_stmt).scalar_one())
        rows = session.execute(stats_stmt).all()

    df = pd.DataFrame(rows, columns=["station_id", "rows", "first_obs_local", "last_obs_local"])
    return total, df


async def backfill(
    settings: AppSettings,
    station_id: str,
    start: str,
    end: str,
    client: Optional[WundergroundClient] = None,
) -> int:
    """Create the schema if needed and ingest every day of the range.

    Returns the number of observations fetched.
    """
    engine = make_engine(settings)
    try:
        create_tables(engine)
        service = HistoryService(settings, engine, client=client)
        result = await service.fetch_range(station_id, start, end)
    finally:
        engine.dispose()
    return len(result.observations)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="PWS history ingestion service")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the HTTP API")

    b = sub.add_parser("backfill", help="Fetch and store every day of a date range")
    b.add_argument("--station", required=True, help="PWS station id, e.g. IALFAR32")
    b.add_argument("--start", required=True, help="First day, YYYYMMDD")
    b.add_argument("--end", required=True, help="Last day, YYYYMMDD (inclusive)")

    s = sub.add_parser("stats", help="Row counts and observation span per station")
    s.add_argument("--station", action="append", default=[], help="Restrict to a station (repeatable)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    settings = AppSettings()

    if args.command == "serve":
        run(settings)
        return

    init_logging(settings.log_level, settings.app_env)

    if args.command == "backfill":
        n = asyncio.run(backfill(settings, args.station, args.start, args.end))
        print(f"Stored {n} observations for {args.station} ({args.start}-{args.end})")
        return

    engine = make_engine(settings)
    try:
        total, stats = fetch_db_stats(engine, args.station)
    finally:
        engine.dispose()

    print(f"Total observations: {total}")
    if stats.empty:
        print("No observations found.")
        return

    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(stats.to_string(index=False))


if __name__ == "__main__":
    main()
