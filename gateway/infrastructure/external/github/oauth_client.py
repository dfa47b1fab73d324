"""GitHub OAuth: authorization URL and code-for-token exchange."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl, urlencode

import httpx
from pydantic import ValidationError

from gateway.domain.exceptions import MissingTokenError, ProviderError, TransportError
from gateway.schemas.github import GitHubTokenResponse
from gateway.shared.telemetry.logging import get_logger
from gateway.shared.telemetry.tracing import traced

logger = get_logger(__name__)

PROVIDER_NAME = "GitHub"
AUTHORIZATION_ENDPOINT = "https://github.com/login/oauth/authorize"
TOKEN_ENDPOINT = "https://github.com/login/oauth/access_token"


class GitHubOAuthClient:
    """Builds the GitHub authorize redirect and exchanges codes for tokens.

    The HTTP client is shared (created in the app lifespan) and carries the
    outbound timeout; this class holds no per-request state.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        authorization_endpoint: str = AUTHORIZATION_ENDPOINT,
        token_endpoint: str = TOKEN_ENDPOINT,
    ) -> None:
        self.http_client = http_client
        self.authorization_endpoint = authorization_endpoint
        self.token_endpoint = token_endpoint

    def build_authorization_url(
        self, client_id: str, redirect_uri: str, scope: str, state: str
    ) -> str:
        """Return the provider authorize URL for a login redirect."""
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "scope": scope,
            "state": state,
        }
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    @traced("github.exchange_code")
    async def exchange_code(self, code: str, client_id: str, client_secret: str) -> str:
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the callback, sent as received.
            client_id: OAuth app client id.
            client_secret: OAuth app client secret.

        Returns:
            The access token.

        Raises:
            ProviderError: The provider answered with an error field.
            MissingTokenError: The body parsed but has no access_token.
            TransportError: Connection failure, timeout or unparseable body.
        """
        try:
            response = await self.http_client.post(
                self.token_endpoint,
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "code": code,
                },
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(
                "%s token exchange transport failure: %s",
                PROVIDER_NAME,
                type(e).__name__,
            )
            raise TransportError(
                f"Could not reach {PROVIDER_NAME}: {type(e).__name__}",
                upstream="github",
            ) from e

        payload = self._parse_body(response)
        try:
            token_data = GitHubTokenResponse.model_validate(payload)
        except ValidationError as e:
            raise TransportError(
                f"Invalid response from {PROVIDER_NAME}", upstream="github"
            ) from e

        if token_data.error:
            logger.warning(
                "%s token exchange rejected: status=%d error=%s",
                PROVIDER_NAME,
                response.status_code,
                token_data.error,
            )
            raise ProviderError(
                PROVIDER_NAME, token_data.error, token_data.error_description
            )
        if not token_data.access_token:
            logger.warning(
                "%s token response without access_token: status=%d",
                PROVIDER_NAME,
                response.status_code,
            )
            raise MissingTokenError()
        return token_data.access_token

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON or form-encoded token response into a dict."""
        content_type = response.headers.get("content-type", "")
        if "application/x-www-form-urlencoded" in content_type:
            return dict(parse_qsl(response.text, keep_blank_values=True))
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "%s token exchange returned unparseable body: status=%d",
                PROVIDER_NAME,
                response.status_code,
            )
            raise TransportError(
                f"Invalid response from {PROVIDER_NAME}", upstream="github"
            ) from e
        if not isinstance(payload, dict):
            raise TransportError(
                f"Invalid response from {PROVIDER_NAME}", upstream="github"
            )
        return payload
