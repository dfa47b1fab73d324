"""Login initiation: redirect the browser to the GitHub authorize page."""

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from gateway.api.dependencies import get_oauth_client
from gateway.core.config import Settings, get_settings
from gateway.core.limiter import limit_login
from gateway.domain.exceptions import ConfigurationError
from gateway.infrastructure.external.github import GitHubOAuthClient

logger = logging.getLogger(__name__)

router = APIRouter()

# 8 random bytes -> 16 hex characters
STATE_BYTES = 8


def generate_state() -> str:
    """Return a fresh random state value for the authorize redirect."""
    return secrets.token_hex(STATE_BYTES)


@router.get(
    "",
    status_code=301,
    response_class=RedirectResponse,
    responses={500: {"description": "OAuth client id not configured"}},
)
@limit_login
async def login(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    oauth_client: Annotated[GitHubOAuthClient, Depends(get_oauth_client)],
):
    """Redirect (301) to the provider with client_id, redirect_uri, scope and state.

    The callback URL is built from the Host header. state is not stored or
    checked on return.
    """
    try:
        client_id = settings.require_client_id()
    except ConfigurationError as e:
        logger.error("Login redirect unavailable: %s", e.message)
        return PlainTextResponse(e.message, status_code=500)

    host = request.headers.get("host", "")
    authorization_url = oauth_client.build_authorization_url(
        client_id=client_id,
        redirect_uri=f"https://{host}/callback",
        scope=settings.oauth_scope,
        state=generate_state(),
    )
    return RedirectResponse(authorization_url, status_code=301)
