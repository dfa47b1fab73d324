"""Application lifespan: startup and shutdown.

Owns the long-lived services: the shared outbound HTTP client and the
authorization code cache with its sweeper task.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from gateway.core.config import get_settings
from gateway.infrastructure.cache.code_cache import CodeCache
from gateway.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


def build_http_client(timeout_seconds: float) -> httpx.AsyncClient:
    """Shared client for GitHub and upload calls; every call is bounded by timeout."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, HTTP client, code cache sweeper, telemetry (when
    create_app attached a GatewayTelemetry).
    Shutdown: sweeper stop, HTTP client close, telemetry shutdown.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.http_client = build_http_client(settings.outbound_timeout_seconds)

    code_cache = CodeCache(
        ttl_seconds=settings.code_cache_ttl_seconds,
        sweep_interval_seconds=settings.code_cache_sweep_interval_seconds,
    )
    code_cache.start()
    app.state.code_cache = code_cache

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        telemetry.start(
            exporter=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    yield

    # ---- Shutdown ----
    await code_cache.stop()

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    if telemetry is not None:
        telemetry.shutdown()
        logger.info("Telemetry shutdown complete")
