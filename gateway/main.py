"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See gateway.core.lifespan and
gateway.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI

from gateway.api import api_router
from gateway.core.config import get_settings
from gateway.core.exception_handlers import register_exception_handlers
from gateway.core.lifespan import create_lifespan
from gateway.core.limiter import limiter
from gateway.middleware import CORSHeadersMiddleware, RequestSizeLimitMiddleware


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter

    register_exception_handlers(app)

    # First added = innermost. CORS headers wrap the size limit so 413s carry them too.
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_upload_size)
    app.add_middleware(
        CORSHeadersMiddleware,
        paths=tuple(p.strip() for p in settings.upload_cors_paths.split(",") if p.strip()),
    )

    if settings.telemetry_enabled:
        from gateway.shared.telemetry.telemetry import GatewayTelemetry

        telemetry = GatewayTelemetry(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.telemetry_environment,
        )
        telemetry.instrument_app(app)
        app.state.telemetry = telemetry

    app.include_router(api_router)

    return app


app = create_app()
