"""OAuth callback: exchange the code and report the result to the opener.

The response is rendered in the login popup, not consumed by a script, so
it is always 200: failures are reported through the error page's
postMessage instead of an HTTP status.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from gateway.api.dependencies import get_code_cache, get_oauth_client
from gateway.core.config import Settings, get_settings
from gateway.core.limiter import limit_callback
from gateway.domain.exceptions import GatewayException, MissingCodeError
from gateway.infrastructure.cache.code_cache import CodeCache
from gateway.infrastructure.external.github import GitHubOAuthClient
from gateway.pages import render_error_page, render_success_page

logger = logging.getLogger(__name__)

router = APIRouter()

_NO_STORE = {"Cache-Control": "no-store"}


@router.get("", response_class=HTMLResponse)
@limit_callback
async def oauth_callback(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    code_cache: Annotated[CodeCache, Depends(get_code_cache)],
    oauth_client: Annotated[GitHubOAuthClient, Depends(get_oauth_client)],
    code: str | None = None,
    state: str | None = None,
) -> HTMLResponse:
    """Exchange code for a token (once per code) and render the popup page."""
    provider = settings.oauth_provider
    try:
        if not code:
            raise MissingCodeError()
        client_id, client_secret = settings.require_client_credentials()
        if not state:
            logger.debug("OAuth callback received without state")
        token = await code_cache.get_or_exchange(
            code,
            lambda: oauth_client.exchange_code(code, client_id, client_secret),
        )
    except GatewayException as e:
        logger.error("OAuth error: %s", e.message)
        return HTMLResponse(
            render_error_page(provider, e.message), status_code=200, headers=_NO_STORE
        )
    except Exception:
        logger.exception("OAuth callback failed unexpectedly")
        return HTMLResponse(
            render_error_page(provider, "Authorization failed"),
            status_code=200,
            headers=_NO_STORE,
        )

    return HTMLResponse(
        render_success_page(provider, token, delay_ms=settings.notify_delay_ms),
        status_code=200,
        headers=_NO_STORE,
    )
