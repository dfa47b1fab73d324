"""Upload endpoint: org-gated relay of a file to the storage API.

Consumed by the CMS from script, so failures use ordinary status codes:
401 no bearer token, 500 API key not configured, 403 not an org member,
400 no Content-Type. Checks run in that order and each one fails before
any later outbound call is made.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from gateway.api.dependencies import (
    get_bearer_token,
    get_membership_verifier,
    get_upload_relay,
)
from gateway.core.config import Settings, get_settings
from gateway.core.limiter import limit_upload
from gateway.domain.exceptions import AuthorizationError, MissingContentTypeError
from gateway.infrastructure.external.github import GitHubMembershipVerifier
from gateway.infrastructure.external.storage import UploadRelay
from gateway.schemas.upload import ErrorResponse, UploadResult

router = APIRouter()


@router.options("")
def upload_preflight() -> Response:
    """CORS preflight: bare 200 (headers come from CORSHeadersMiddleware)."""
    return Response(status_code=200)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def upload_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": "Method not allowed"},
        headers={"Allow": "POST, OPTIONS"},
    )


@router.post(
    "",
    response_model=UploadResult,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
@limit_upload
async def upload(
    request: Request,
    token: Annotated[str, Depends(get_bearer_token)],
    settings: Annotated[Settings, Depends(get_settings)],
    verifier: Annotated[GitHubMembershipVerifier, Depends(get_membership_verifier)],
    relay: Annotated[UploadRelay, Depends(get_upload_relay)],
) -> UploadResult:
    """Verify org membership, buffer the body and relay it with its Content-Type."""
    api_key = settings.require_upload_api_key()
    if not await verifier.is_member(token, settings.github_org):
        raise AuthorizationError(settings.github_org)
    content_type = request.headers.get("content-type")
    if not content_type:
        raise MissingContentTypeError()
    body = await request.body()
    return await relay.relay(body, content_type, api_key)
