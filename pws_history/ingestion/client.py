from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config import AppSettings
from ..errors import ConfigurationError, UpstreamError, UpstreamHTTPError, UpstreamParseError


@dataclass
class WundergroundClient:
    """Client for the weather.com PWS daily history endpoint.

    Notes and assumptions:
    - One request returns every observation of one station for one calendar
      day, in metric units (`units=m`).
    - The API key comes from `settings.wu_api_key`; a missing key is reported
      before any request is made.
    - No retries. `settings.wu_timeout_s` of None waits indefinitely.
    - `transport` lets tests substitute an `httpx.MockTransport`.
    """

    settings: AppSettings
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _api_key(self) -> str:
        key = self.settings.wu_api_key
        if not key:
            raise ConfigurationError("WU API key is not configured (set APP_WU_API_KEY)")
        return key

    def session(self) -> httpx.AsyncClient:
        """A new `httpx.AsyncClient`; share one across the days of a range."""
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(self.settings.wu_timeout_s),
        )

    async def fetch_history(
        self, station_id: str, date: str, http: Optional[httpx.AsyncClient] = None
    ) -> Dict[str, Any]:
        """Fetch the raw history payload of `station_id` for YYYYMMDD `date`.

        `http` is reused when given, otherwise a client is opened for this call.

        Returns
        -------
        dict
            The parsed JSON body, or an empty dict when the body is empty.

        Raises
        ------
        ConfigurationError
            No API key configured.
        UpstreamHTTPError
            Non-2xx response; `status_code` holds the upstream status.
        UpstreamParseError
            Non-empty body that is not valid JSON.
        UpstreamError
            The request could not be completed.
        """
        params = {
            "stationId": station_id,
            "format": "json",
            "units": "m",
            "date": date,
            "apiKey": self._api_key(),
        }

        try:
            if http is not None:
                resp = await http.get(self.settings.wu_base_url, params=params)
            else:
                async with self.session() as client:
                    resp = await client.get(self.settings.wu_base_url, params=params)
        except httpx.TransportError as e:
            raise UpstreamError(f"WU request failed: {e}") from e

        if not resp.is_success:
            raise UpstreamHTTPError(resp.status_code)

        text = resp.text
        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError as e:
            raise UpstreamParseError(f"WU returned invalid JSON: {e}") from e
