"""Domain exceptions for the gateway.

Every failure a handler can report derives from GatewayException. The
presentation layer maps error_code to an HTTP status in
gateway.core.exception_handlers; the callback route renders the message
into the popup error page instead.
"""

from typing import Any


class GatewayException(Exception):
    """Base exception for all gateway errors.

    Attributes:
        message: Human-readable error description, relayed to the caller.
        error_code: Machine-readable error code.
        details: Additional error context (never secrets or tokens).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error envelope sent to clients."""
        return {"error": self.message}


class ConfigurationError(GatewayException):
    """Raised when a required secret or id is not configured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class ClientInputError(GatewayException):
    """Raised when the request is missing a required input."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class MissingCodeError(ClientInputError):
    """Raised when the OAuth callback carries no authorization code."""

    def __init__(self) -> None:
        super().__init__("Missing code", field="code")


class MissingContentTypeError(ClientInputError):
    """Raised when an upload has no Content-Type header."""

    def __init__(self) -> None:
        super().__init__("Missing content-type", field="content-type")


class MissingAuthorizationError(ClientInputError):
    """Raised when the Authorization header is absent or not a bearer token."""

    def __init__(self, message: str = "Missing authorization token") -> None:
        super().__init__(message, field="authorization")
        self.error_code = "AUTHENTICATION_ERROR"


class AuthorizationError(GatewayException):
    """Raised when the caller is not a member of the required organization."""

    def __init__(self, org: str) -> None:
        super().__init__(
            f"You must be a member of the {org} organization",
            "AUTHORIZATION_ERROR",
            {"org": org},
        )


class TransportError(GatewayException):
    """Raised on connection failure, timeout or an unparseable upstream body."""

    def __init__(self, message: str, upstream: str | None = None) -> None:
        details = {"upstream": upstream} if upstream else {}
        super().__init__(message, "TRANSPORT_ERROR", details)


class UpstreamProtocolError(GatewayException):
    """Raised when an upstream returns a recognizable error payload."""

    def __init__(self, message: str, error_code: str = "UPSTREAM_ERROR") -> None:
        super().__init__(message, error_code)


class ProviderError(UpstreamProtocolError):
    """Raised when the OAuth provider answers the token exchange with an error."""

    def __init__(self, provider: str, error: str, description: str | None) -> None:
        message = f"{provider}: {error}"
        if description:
            message = f"{message} - {description}"
        super().__init__(message, "PROVIDER_ERROR")
        self.error = error
        self.description = description


class MissingTokenError(UpstreamProtocolError):
    """Raised when the token response parses but carries no access token."""

    def __init__(self) -> None:
        super().__init__("No access_token in response", "MISSING_TOKEN")


class UploadError(UpstreamProtocolError):
    """Raised when the storage API reports a failed upload."""

    def __init__(self, message: str = "Upload failed") -> None:
        super().__init__(message, "UPLOAD_ERROR")
