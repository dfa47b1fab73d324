"""Request body size limit middleware.

Uploads are buffered in memory before being relayed, so bodies above
max_bytes are rejected with 413. Checks Content-Length up front and counts
streamed bytes for chunked bodies. Raw ASGI.
"""

import json
from typing import Callable


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("latin-1")
    return None


async def _send_413(send: Callable, max_bytes: int) -> None:
    body = json.dumps(
        {"error": f"Request body must be at most {max_bytes} bytes"}
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


class _BodyTooLarge(Exception):
    pass


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        content_length = _get_header(scope, "content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_bytes:
            await _send_413(send, max_bytes)
            return

        received = 0
        response_started = False

        async def counting_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    raise _BodyTooLarge()
            return message

        async def tracking_send(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await app(scope, counting_receive, tracking_send)
        except _BodyTooLarge:
            if response_started:
                raise
            await _send_413(send, max_bytes)

    return asgi_app
