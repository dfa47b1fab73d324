"""Pytest configuration and fixtures for the gateway.

HTTP tests run create_app() over ASGITransport. The lifespan does not run
under ASGITransport, so fixtures put the shared HTTP client (backed by
httpx.MockTransport) and the code cache on app.state themselves.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from gateway.core.config import get_settings
from gateway.infrastructure.cache.code_cache import CodeCache
from gateway.main import create_app

TEST_CLIENT_ID = "test-client-id"
TEST_CLIENT_SECRET = "test-client-secret"
TEST_UPLOAD_API_KEY = "test-upload-key"

Handler = Callable[[httpx.Request], Any]


class FakeUpstream:
    """Routes outbound requests by method and URL (without query) to canned handlers.

    Every request is recorded; unknown routes answer 599 so a test sees them.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, url: str, handler: Handler | httpx.Response) -> None:
        if isinstance(handler, httpx.Response):
            template = handler
            self.routes[(method, url)] = lambda request: httpx.Response(
                template.status_code,
                headers=template.headers,
                content=template.content,
            )
        else:
            self.routes[(method, url)] = handler

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and self._key_url(r) == url
        ]

    @staticmethod
    def _key_url(request: httpx.Request) -> str:
        url = request.url
        return f"{url.scheme}://{url.host}{url.path}"

    def handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        handler = self.routes.get((request.method, self._key_url(request)))
        if handler is None:
            return httpx.Response(599, json={"unexpected": str(request.url)})
        return handler(request)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def gateway_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Configure credentials and disable rate limiting and telemetry."""
    env = {
        "OAUTH_GITHUB_CLIENT_ID": TEST_CLIENT_ID,
        "OAUTH_GITHUB_CLIENT_SECRET": TEST_CLIENT_SECRET,
        "WAVESPEED_UPLOAD_API_KEY": TEST_UPLOAD_API_KEY,
        "RATE_LIMIT_ENABLED": "false",
        "TELEMETRY_ENABLED": "false",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield env
    get_settings.cache_clear()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    """Outbound client whose requests are answered by the fake upstream."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)) as client:
        yield client


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def code_cache(fake_clock: FakeClock) -> CodeCache:
    return CodeCache(ttl_seconds=300, sweep_interval_seconds=60, clock=fake_clock)


@pytest.fixture
def app(
    gateway_env: dict[str, str],
    http_client: httpx.AsyncClient,
    code_cache: CodeCache,
) -> FastAPI:
    application = create_app()
    application.state.http_client = http_client
    application.state.code_cache = code_cache
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://gateway.test") as ac:
        yield ac
