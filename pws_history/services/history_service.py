from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..config import AppSettings
from ..ingestion.client import WundergroundClient
from ..ingestion.dates import expand_dates
from ..ingestion.models import WeatherData
from ..ingestion.storage import extract_observations, read_recent_observations, save_observations

logger = structlog.get_logger()

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def parse_limit(raw: Optional[str]) -> int:
    """Turn the `limit` query value into a row count in [1, MAX_LIMIT].

    Absent, non-numeric or non-positive values fall back to DEFAULT_LIMIT.
    """
    try:
        limit = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


@dataclass
class RangeResult:
    observations: List[Any]
    station_id: str
    start: str
    end: str


class HistoryService:
    def __init__(self, settings: AppSettings, engine, client: Optional[WundergroundClient] = None):
        self.settings = settings
        self.engine = engine
        self.client = client or WundergroundClient(settings)

    async def fetch_day(
        self, station_id: str, date: str, http: Optional[httpx.AsyncClient] = None
    ) -> Dict[str, Any]:
        """Fetch one day from upstream, store its observations, return the raw payload."""
        payload = await self.client.fetch_history(station_id, date, http=http)
        # sqlite writes block; keep the loop serving the other days meanwhile
        await asyncio.to_thread(save_observations, self.engine, station_id, date, payload)
        return payload

    async def fetch_range(self, station_id: str, start: str, end: str) -> RangeResult:
        """Ingest every day from `start` to `end` inclusive.

        Days are fetched concurrently (at most `range_max_concurrency` at a
        time when set) over one shared HTTP client, but observations come
        back in date order. The first failing day cancels the others and its
        error is raised.
        """
        dates = expand_dates(start, end)
        cap = self.settings.range_max_concurrency
        limiter = asyncio.Semaphore(cap) if cap is not None else None

        async with self.client.session() as http:

            async def _one(date: str) -> List[Any]:
                if limiter is None:
                    payload = await self.fetch_day(station_id, date, http=http)
                else:
                    async with limiter:
                        payload = await self.fetch_day(station_id, date, http=http)
                return extract_observations(payload)

            tasks = [asyncio.ensure_future(_one(d)) for d in dates]
            try:
                per_day = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                # settle every task before the shared client closes
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        observations = [obs for day in per_day for obs in day]
        logger.info(
            "range_ingested",
            station_id=station_id,
            start=start,
            end=end,
            days=len(dates),
            observations=len(observations),
        )
        return RangeResult(observations=observations, station_id=station_id, start=start, end=end)

    async def recent_observations(self, limit: int) -> List[WeatherData]:
        return await asyncio.to_thread(read_recent_observations, self.engine, limit)
