"""UploadRelay tests: forwarding and response normalization."""

import httpx
import pytest

from gateway.domain.exceptions import MissingContentTypeError, TransportError, UploadError
from gateway.infrastructure.external.storage import UploadRelay

UPLOAD_URL = "https://scheduler.wavespeed.ai/api/v1/files/upload/binary"
MULTIPART = "multipart/form-data; boundary=----WebKitFormBoundary7MA4YWxkTrZu0gW"


@pytest.fixture
def relay(http_client: httpx.AsyncClient) -> UploadRelay:
    return UploadRelay(http_client)


async def test_relay_returns_full_path(relay, upstream) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(200, json={"code": 200, "data": {"full_path": "/x/y.png"}}))

    result = await relay.relay(b"--body--", MULTIPART, "key-1")

    assert result.url == "/x/y.png"
    [request] = upstream.calls("POST", UPLOAD_URL)
    assert request.content == b"--body--"
    assert request.headers["content-type"] == MULTIPART
    assert request.headers["authorization"] == "Bearer key-1"


async def test_relay_relays_downstream_message(relay, upstream) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(200, json={"code": 500, "message": "boom"}))
    with pytest.raises(UploadError, match="boom"):
        await relay.relay(b"x", "image/png", "key")


@pytest.mark.parametrize(
    "payload",
    [
        {"code": 500, "message": "boom", "data": "x"},
        {"code": "500", "message": "boom"},
        {"code": 200, "message": "boom", "data": {"full_path": 7}},
    ],
)
async def test_relay_keeps_message_when_other_fields_are_malformed(relay, upstream, payload) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(200, json=payload))
    with pytest.raises(UploadError, match="boom"):
        await relay.relay(b"x", "image/png", "key")


@pytest.mark.parametrize(
    "payload",
    [
        {"code": 500},
        {"code": 200},
        {"code": 200, "data": {}},
        {"code": 200, "data": {"full_path": ""}},
        {"code": "200", "data": {"full_path": "/x/y.png"}},
        {"data": {"full_path": "/x/y.png"}},
    ],
)
async def test_relay_without_success_shape_raises_generic_error(relay, upstream, payload) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(200, json=payload))
    with pytest.raises(UploadError, match="Upload failed"):
        await relay.relay(b"x", "image/png", "key")


async def test_relay_non_object_json_is_upload_error(relay, upstream) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(200, json=["unexpected"]))
    with pytest.raises(UploadError):
        await relay.relay(b"x", "image/png", "key")


async def test_relay_non_json_body_is_transport_error(relay, upstream) -> None:
    upstream.on("POST", UPLOAD_URL, httpx.Response(502, content=b"Bad Gateway"))
    with pytest.raises(TransportError):
        await relay.relay(b"x", "image/png", "key")


async def test_relay_connection_error_is_transport_error(relay, upstream) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    upstream.on("POST", UPLOAD_URL, refuse)
    with pytest.raises(TransportError):
        await relay.relay(b"x", "image/png", "key")


async def test_relay_requires_content_type(relay, upstream) -> None:
    with pytest.raises(MissingContentTypeError):
        await relay.relay(b"x", "", "key")
    assert upstream.requests == []
