"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Provider credentials and the upload API key are
optional at load time: a missing value must turn into a per-request 500,
not a startup failure, so handlers call the require_* helpers.
"""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from gateway.domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "cms-gateway"
    app_version: str = "1.0.0"
    debug: bool = False

    # GitHub OAuth (env: OAUTH_GITHUB_CLIENT_ID, OAUTH_GITHUB_CLIENT_SECRET)
    oauth_github_client_id: str = ""
    oauth_github_client_secret: SecretStr = SecretStr("")
    oauth_provider: str = "github"
    oauth_scope: str = "repo,user"
    github_authorize_url: str = "https://github.com/login/oauth/authorize"
    github_token_url: str = "https://github.com/login/oauth/access_token"
    github_api_url: str = "https://api.github.com"
    github_org: str = "WaveSpeedAI"
    user_agent: str = "WaveSpeed-CMS"

    # Upload (env: WAVESPEED_UPLOAD_API_KEY)
    wavespeed_upload_api_key: SecretStr = SecretStr("")
    upload_api_url: str = "https://scheduler.wavespeed.ai/api/v1/files/upload/binary"
    max_upload_size: int = 100 * 1024 * 1024  # 100MB
    upload_cors_paths: str = "/upload"

    # Outbound HTTP: every call to GitHub or the upload API is bounded.
    outbound_timeout_seconds: float = 10.0

    # Authorization code cache
    code_cache_ttl_seconds: float = 300.0
    code_cache_sweep_interval_seconds: float = 60.0

    # Delay between the "authorizing" and "success" messages posted to the opener.
    notify_delay_ms: int = 100

    # Rate limits (slowapi limit strings)
    rate_limit_enabled: bool = True
    rate_limit_login: str = "30/minute"
    rate_limit_callback: str = "30/minute"
    rate_limit_upload: str = "60/minute"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    def require_client_id(self) -> str:
        """Return the GitHub OAuth client id or raise ConfigurationError."""
        client_id = self.oauth_github_client_id.strip()
        if not client_id:
            raise ConfigurationError("Missing OAUTH_GITHUB_CLIENT_ID")
        return client_id

    def require_client_credentials(self) -> tuple[str, str]:
        """Return (client_id, client_secret) or raise ConfigurationError.

        Raises:
            ConfigurationError: If either value is unset or blank.
        """
        client_id = self.oauth_github_client_id.strip()
        client_secret = self.oauth_github_client_secret.get_secret_value().strip()
        if not client_id or not client_secret:
            raise ConfigurationError("Missing credentials")
        return client_id, client_secret

    def require_upload_api_key(self) -> str:
        """Return the upload API key or raise ConfigurationError."""
        api_key = self.wavespeed_upload_api_key.get_secret_value().strip()
        if not api_key:
            raise ConfigurationError("Missing upload API key")
        return api_key


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    In tests, call get_settings.cache_clear() after overriding env vars so
    the next get_settings() uses the new values.

    Returns:
        Loaded Settings instance.
    """
    return Settings()
