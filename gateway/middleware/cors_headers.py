"""Static CORS headers for script-facing routes.

The upload route is called cross-origin by the CMS with a bearer token, so
every response on it (errors, 405, preflight) carries the same fixed
headers regardless of the Origin header. Raw ASGI.

An exception that escapes the app before the response starts is answered
here with a 500 {"error": ...}, so the script can still read the error.
"""

import logging
from typing import Callable

from starlette.responses import JSONResponse

from gateway.core.config import get_settings

logger = logging.getLogger(__name__)

UPLOAD_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def CORSHeadersMiddleware(
    app: Callable,
    paths: tuple[str, ...] = ("/upload",),
    headers: dict[str, str] | None = None,
) -> Callable:
    """Set CORS headers on every response whose path is in paths."""
    resolved = headers if headers is not None else UPLOAD_CORS_HEADERS.copy()
    header_list = [(k.lower().encode(), v.encode()) for k, v in resolved.items()]
    header_names = {name for name, _ in header_list}
    prefixes = tuple(p.rstrip("/") for p in paths)

    def _matches(path: str) -> bool:
        path = path.rstrip("/")
        return any(path == p or path.startswith(p + "/") for p in prefixes)

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or not _matches(scope.get("path", "")):
            await app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = [
                    (k, v)
                    for k, v in message.get("headers", [])
                    if k.lower() not in header_names
                ]
                headers.extend(header_list)
                message["headers"] = headers
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            logger.exception("Unhandled exception on %s: %s", scope.get("path"), exc)
            detail = str(exc) if get_settings().debug else "Internal server error"
            response = JSONResponse(status_code=500, content={"error": detail})
            await response(scope, receive, send_wrapper)

    return asgi_app
