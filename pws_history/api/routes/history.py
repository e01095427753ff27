from typing import Any, Optional

from fastapi import APIRouter, Query, Request

from ...errors import BadRequestError
from ...schemas.weather import RangeResponse

router = APIRouter()


@router.get(
    "/history",
    summary="Fetch and store one day of PWS history",
    responses={
        200: {"description": "Raw upstream history payload"},
        400: {"description": "stationId or date missing"},
        500: {"description": "Upstream, configuration or storage failure"},
    },
)
async def get_history(
    request: Request,
    station_id: Optional[str] = Query(None, alias="stationId"),
    date: Optional[str] = Query(None, description="YYYYMMDD"),
) -> Any:
    if not station_id or not date:
        raise BadRequestError("Missing stationId or date parameter")
    history_service = request.app.state.history_service
    return await history_service.fetch_day(station_id, date)


@router.get(
    "/history/range",
    response_model=RangeResponse,
    summary="Fetch and store every day of a date range",
    responses={
        400: {"description": "Missing parameters, invalid dates or start after end"},
        500: {"description": "Any day of the range failed"},
    },
)
async def get_history_range(
    request: Request,
    station_id: Optional[str] = Query(None, alias="stationId"),
    start: Optional[str] = Query(None, description="YYYYMMDD"),
    end: Optional[str] = Query(None, description="YYYYMMDD"),
) -> RangeResponse:
    if not station_id or not start or not end:
        raise BadRequestError("Missing stationId, start or end parameter")
    history_service = request.app.state.history_service
    result = await history_service.fetch_range(station_id, start, end)
    return RangeResponse(
        observations=result.observations,
        station_id=result.station_id,
        start=result.start,
        end=result.end,
    )
