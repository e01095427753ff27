from typing import Optional

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import create_engine

import structlog

from ..config import AppSettings
from ..errors import PWSHistoryError
from ..ingestion.models import create_tables
from ..logging import init_logging
from ..services.history_service import HistoryService
from .middleware import (
    NoCacheMiddleware,
    RequestIDMiddleware,
    generic_exception_handler,
    pws_error_handler,
)
from .routes import health, history, local, static

logger = structlog.get_logger()


def make_engine(settings: AppSettings):
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(settings.database_url, future=True, connect_args=connect_args)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    settings = settings or AppSettings()
    init_logging(settings.log_level, settings.app_env)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Schema must exist before traffic; a failure here aborts startup
        create_tables(app.state.engine)
        logger.info("database_initialized", database_url=settings.database_url)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service health and uptime"},
            {"name": "wu", "description": "Weather Underground PWS history ingestion"},
            {"name": "local", "description": "Stored observations"},
        ],
    )

    app.add_middleware(NoCacheMiddleware, prefix="/api")
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(PWSHistoryError, pws_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router, tags=["health"])
    app.include_router(history.router, prefix="/api/wu", tags=["wu"])
    app.include_router(local.router, prefix="/api/local", tags=["local"])
    # Catch-all, must stay last
    app.include_router(static.router)

    app.state.settings = settings
    app.state.start_time = time.time()
    # Initialize non-IO services immediately so tests without lifespan still work
    app.state.engine = make_engine(settings)
    app.state.history_service = HistoryService(settings, app.state.engine)

    return app


def run(settings: Optional[AppSettings] = None) -> None:
    import uvicorn

    s = settings or AppSettings()
    uvicorn.run(create_app(s), host=s.host, port=s.port)


if __name__ == "__main__":
    run()
