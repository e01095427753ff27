from __future__ import annotations

import datetime as dt
import re
from typing import List

import pandas as pd

from ..errors import InvalidRangeError

_YYYYMMDD = re.compile(r"^\d{8}$")


def parse_date(value: str) -> dt.date:
    """Parse an 8-digit YYYYMMDD string into a calendar date.

    Impossible dates such as 20240230 are rejected rather than rolled over.
    """
    if not isinstance(value, str) or not _YYYYMMDD.match(value):
        raise InvalidRangeError(f"Invalid date {value!r}, expected YYYYMMDD")
    try:
        return dt.datetime.strptime(value, "%Y%m%d").date()
    except ValueError as e:
        raise InvalidRangeError(f"Invalid date {value!r}: {e}") from e


def expand_dates(start: str, end: str) -> List[str]:
    """Every calendar day from `start` to `end` inclusive, ascending, as YYYYMMDD."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date > end_date:
        raise InvalidRangeError(f"Invalid date range: start {start} is after end {end}")
    try:
        days = pd.date_range(start=start_date, end=end_date, freq="D")
    except ValueError as e:
        # pandas timestamps cover roughly years 1677-2262
        raise InvalidRangeError(f"Unsupported date range {start}-{end}: {e}") from e
    return list(days.strftime("%Y%m%d"))
