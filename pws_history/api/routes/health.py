import time
from fastapi import APIRouter, Request

import structlog
from ...schemas.health import HealthResponse

router = APIRouter()
logger = structlog.get_logger()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness and ingestion readiness",
    responses={
        200: {
            "description": "Process is up; `wu_configured` tells whether history fetches can succeed",
            "content": {
                "application/json": {
                    "example": {
                        "ok": True,
                        "status": "ok",
                        "uptime_s": 12.34,
                        "version": "0.1.0",
                        "wu_configured": True,
                    }
                }
            },
        }
    },
)
def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    uptime = max(0.0, time.time() - float(getattr(request.app.state, "start_time", time.time())))
    wu_configured = bool(settings.wu_api_key)
    if not wu_configured:
        # liveness stays ok; every /api/wu call will answer 500 until the key is set
        logger.warning("wu_api_key_missing")
    return HealthResponse(
        ok=True,
        status="ok",
        uptime_s=uptime,
        version=settings.app_version,
        wu_configured=wu_configured,
    )
