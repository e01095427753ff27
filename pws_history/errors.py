"""Error taxonomy shared by the ingestion pipeline and the HTTP layer.

Each error carries the HTTP status the API answers with when it escapes a
route handler.
"""

from __future__ import annotations

from typing import Optional


class PWSHistoryError(Exception):
    http_status: int = 500


class ConfigurationError(PWSHistoryError):
    """Raised when a required setting (e.g. the upstream API key) is missing."""


class UpstreamError(PWSHistoryError):
    """The weather history API could not be reached."""


class UpstreamHTTPError(UpstreamError):
    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"WU HTTP {status_code}")


class UpstreamParseError(UpstreamError):
    """The weather history API answered with a body that is not JSON."""


class BadRequestError(PWSHistoryError):
    http_status = 400


class InvalidRangeError(BadRequestError):
    """Start or end date is not a YYYYMMDD calendar date, or start > end."""


class StoreError(PWSHistoryError):
    """Any failure of the relational store."""
