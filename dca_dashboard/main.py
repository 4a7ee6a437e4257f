"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dca_dashboard.api.routes import api_router
from dca_dashboard.config import get_settings
from dca_dashboard.core.logging import setup_logging
from dca_dashboard.core.telemetry import setup_telemetry

logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version="0.1.0")
setup_logging(settings.log_level)
setup_telemetry(app, settings)
logger.info("Starting with settings %s", settings.dict_for_logging())

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["traceparent", "tracestate"],
)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str | float]:
    """Return service readiness metadata."""

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data_base_path": settings.data_base_path,
        "refresh_interval_seconds": settings.refresh_interval_seconds,
    }


def configure_app() -> FastAPI:
    """Attach routes."""

    app.include_router(api_router)
    return app


configure_app()

__all__ = ["app", "configure_app"]
