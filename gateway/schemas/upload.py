"""Upload API schemas: downstream storage payload and gateway responses."""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class UploadApiData(BaseModel):
    """Nested data block of a storage API response."""

    model_config = ConfigDict(extra="ignore")

    full_path: str | None = None


class UploadApiResponse(BaseModel):
    """Storage API response envelope.

    code is strict: only the integer 200 signals success, "200" does not.
    A field of the wrong type reads as absent, so a failure reply still
    yields its message.
    """

    model_config = ConfigDict(extra="ignore")

    code: int | None = Field(default=None, strict=True)
    message: str | None = None
    data: UploadApiData | None = None

    @field_validator("code", "message", "data", mode="wrap")
    @classmethod
    def _absent_when_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def full_path(self) -> str | None:
        return self.data.full_path if self.data else None

    def is_success(self) -> bool:
        return self.code == 200 and bool(self.full_path)


class UploadResult(BaseModel):
    """Response for POST /upload on success."""

    url: str = Field(..., description="Public path of the stored file")


class ErrorResponse(BaseModel):
    """JSON error envelope."""

    error: str = Field(..., description="Human-readable error message")
