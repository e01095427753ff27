from typing import List, Optional

from fastapi import APIRouter, Query, Request

from ...schemas.weather import StoredObservation
from ...services.history_service import parse_limit

router = APIRouter()


@router.get(
    "/weather",
    response_model=List[StoredObservation],
    summary="Most recently observed stored rows",
)
async def get_local_weather(
    request: Request,
    limit: Optional[str] = Query(None, description="Row count, default 100, max 1000"),
) -> List[StoredObservation]:
    history_service = request.app.state.history_service
    rows = await history_service.recent_observations(parse_limit(limit))
    return [StoredObservation.model_validate(r) for r in rows]
