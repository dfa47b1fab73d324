"""GitHub response payloads.

Upstream bodies are validated here instead of read as loose dicts: a field
that is missing or has the wrong type is a parse failure.
"""

from pydantic import BaseModel, ConfigDict, Field


class GitHubTokenResponse(BaseModel):
    """Body of POST /login/oauth/access_token (JSON or form encoded)."""

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    token_type: str | None = None
    scope: str | None = None
    error: str | None = None
    error_description: str | None = None


class GitHubUser(BaseModel):
    """Subset of GET /user used to identify the caller."""

    model_config = ConfigDict(extra="ignore")

    login: str = Field(..., min_length=1)
