"""GitHub adapters: OAuth token exchange and organization membership."""

from gateway.infrastructure.external.github.membership import GitHubMembershipVerifier
from gateway.infrastructure.external.github.oauth_client import GitHubOAuthClient

__all__ = ["GitHubMembershipVerifier", "GitHubOAuthClient"]
