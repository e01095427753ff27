import logging
import sys

import structlog


def init_logging(log_level: str = "INFO", app_env: str = "development") -> structlog.BoundLogger:
    """Configure structlog for the service.

    Events carry any context bound with `structlog.contextvars` (the API
    binds `request_id` per request, so ingestion events of one request share
    it). JSON lines everywhere except at DEBUG, which uses the console
    renderer.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # httpx logs each request URL at INFO, apiKey query param included
    logging.getLogger("httpx").setLevel(logging.WARNING)

    renderer = structlog.dev.ConsoleRenderer() if level == logging.DEBUG else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger().bind(service="pws-history", env=app_env)
