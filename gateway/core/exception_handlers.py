"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to JSON {"error": message} responses. The callback route does not
rely on these: it always renders its popup page with status 200, and a
rate-limited callback is answered with that page too.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from gateway.core.config import get_settings
from gateway.domain.exceptions import GatewayException
from gateway.pages import render_error_page

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "CONFIGURATION_ERROR": 500,
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "AUTHORIZATION_ERROR": 403,
    "TRANSPORT_ERROR": 500,
    "UPSTREAM_ERROR": 500,
    "PROVIDER_ERROR": 500,
    "MISSING_TOKEN": 500,
    "UPLOAD_ERROR": 500,
}


def _gateway_exception_handler(request: Request, exc: GatewayException) -> JSONResponse:
    """Return JSON from GatewayException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 500)
    if status >= 500:
        logger.error(
            "%s %s failed: %s (%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.error_code,
        )
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={"error": "Request validation failed", "details": exc.errors()},
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (e.g. 404, 405)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(status_code=500, content={"error": detail})


CALLBACK_PATH = "/callback"


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 JSON, except on the callback: the popup still gets a 200 error page."""
    if request.url.path.rstrip("/") == CALLBACK_PATH:
        logger.warning("OAuth callback rate limited: %s", exc.detail)
        return HTMLResponse(
            render_error_page(get_settings().oauth_provider, "Rate limit exceeded"),
            status_code=200,
            headers={"Cache-Control": "no-store"},
        )
    return _rate_limit_exceeded_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: GatewayException (and subclasses), RequestValidationError,
    RateLimitExceeded, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(GatewayException, _gateway_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
