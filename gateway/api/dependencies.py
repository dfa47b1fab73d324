"""Request dependencies (composition root).

Long-lived services live on app.state (created in gateway.core.lifespan);
adapters are built per request around the shared HTTP client.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Header, Request

from gateway.core.config import Settings, get_settings
from gateway.domain.exceptions import MissingAuthorizationError
from gateway.infrastructure.cache.code_cache import CodeCache
from gateway.infrastructure.external.github import (
    GitHubMembershipVerifier,
    GitHubOAuthClient,
)
from gateway.infrastructure.external.storage import UploadRelay

BEARER_PREFIX = "Bearer "


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound HTTP client created at startup."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise RuntimeError("HTTP client not initialized; is the app lifespan running?")
    return client


def get_code_cache(request: Request) -> CodeCache:
    """Process-wide authorization code cache created at startup."""
    cache = getattr(request.app.state, "code_cache", None)
    if cache is None:
        raise RuntimeError("Code cache not initialized; is the app lifespan running?")
    return cache


def get_oauth_client(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GitHubOAuthClient:
    return GitHubOAuthClient(
        http_client,
        authorization_endpoint=settings.github_authorize_url,
        token_endpoint=settings.github_token_url,
    )


def get_membership_verifier(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GitHubMembershipVerifier:
    return GitHubMembershipVerifier(
        http_client, api_url=settings.github_api_url, user_agent=settings.user_agent
    )


def get_upload_relay(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadRelay:
    return UploadRelay(http_client, upload_url=settings.upload_api_url)


def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Extract the token from "Authorization: Bearer <token>".

    Raises:
        MissingAuthorizationError: Header absent, not a bearer token, or empty.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingAuthorizationError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingAuthorizationError()
    return token
