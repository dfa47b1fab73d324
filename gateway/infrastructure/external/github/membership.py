"""GitHub organization membership checks for bearer tokens.

The members endpoint is keyed by username, so the token is first resolved
to a login via GET /user; both calls carry the same bearer token.
Decisions are not cached: every upload re-verifies.
"""

from __future__ import annotations

import json
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from gateway.domain.exceptions import TransportError
from gateway.schemas.github import GitHubUser
from gateway.shared.telemetry.logging import get_logger
from gateway.shared.telemetry.tracing import traced

logger = get_logger(__name__)

API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "WaveSpeed-CMS"

# 204: member. 302: requester is not an org member. 404: user is not a member.
MEMBER_STATUS = 204


class GitHubMembershipVerifier:
    """Answers "does this token belong to a member of org?"."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: str = API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": self.user_agent,
            "Accept": "application/vnd.github+json",
        }

    @traced("github.get_identity")
    async def get_identity(self, token: str) -> str | None:
        """Return the login of the token's owner, or None on any failure."""
        try:
            response = await self.http_client.get(
                f"{self.api_url}/user", headers=self._headers(token)
            )
        except httpx.HTTPError as e:
            logger.warning("GitHub identity lookup failed: %s", type(e).__name__)
            return None
        if not response.is_success:
            logger.info("GitHub identity lookup rejected: status=%d", response.status_code)
            return None
        try:
            return GitHubUser.model_validate(response.json()).login
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
            logger.warning("GitHub identity response has no usable login")
            return None

    @traced("github.check_membership")
    async def check_membership(self, username: str, org: str, token: str) -> bool:
        """Return True only when the members endpoint answers 204.

        Redirects are not followed; 302 and 404 both mean not a member.

        Raises:
            TransportError: The membership endpoint could not be reached.
        """
        url = f"{self.api_url}/orgs/{quote(org, safe='')}/members/{quote(username, safe='')}"
        try:
            response = await self.http_client.get(
                url, headers=self._headers(token), follow_redirects=False
            )
        except httpx.HTTPError as e:
            logger.error("GitHub membership check failed: %s", type(e).__name__)
            raise TransportError(
                f"Could not reach GitHub: {type(e).__name__}", upstream="github"
            ) from e
        if response.status_code != MEMBER_STATUS:
            logger.info(
                "GitHub membership denied: org=%s user=%s status=%d",
                org,
                username,
                response.status_code,
            )
            return False
        return True

    async def is_member(self, token: str, org: str) -> bool:
        """Resolve the token's user and check membership in org."""
        username = await self.get_identity(token)
        if not username:
            return False
        return await self.check_membership(username=username, org=org, token=token)
