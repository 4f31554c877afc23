# -*- coding: utf-8 -*-
"""
MDM ML Adapter - FastAPI application

Builds the HTTP application: health and metrics endpoints plus the
match-configuration router. Serving the application is left to the
deployment (any ASGI server).

Example:
    >>> from mdm_adapter.app import create_app
    >>> app = create_app()
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from mdm_adapter import __version__
from mdm_adapter.match_config.config import MatchConfigConfig, get_config
from mdm_adapter.match_config.setup import configure_match_config

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Adapter version")
    uptime_seconds: float = Field(..., description="Uptime in seconds")


def create_app(
    config: Optional[MatchConfigConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create the adapter application.

    Args:
        config: Adapter configuration; loaded from env when omitted.
        transport: Optional httpx transport for upstream calls.

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = get_config()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("mdm_adapter").setLevel(config.log_level.upper())

    app = FastAPI(
        title="MDM ML Adapter",
        description="Match configuration and ground-truth proxy for ML tuning",
        version=__version__,
    )
    startup_time = datetime.now(timezone.utc)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        """Health check endpoint for liveness probes."""
        uptime = (datetime.now(timezone.utc) - startup_time).total_seconds()
        return HealthResponse(
            status="healthy",
            version=__version__,
            uptime_seconds=uptime,
        )

    @app.get("/metrics", tags=["Observability"])
    async def metrics():
        """Prometheus metrics endpoint."""
        from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "An internal error occurred"},
        )

    configure_match_config(app, config=config, transport=transport)

    logger.info("MDM ML Adapter application created (endpoint=%s)", config.endpoint)
    return app


__all__ = ["create_app"]
