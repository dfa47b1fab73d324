"""Upload relay to the WaveSpeed file storage API.

The inbound body is forwarded byte-for-byte with its original Content-Type
(multipart boundary included). The caller buffers the body first.
"""

from __future__ import annotations

import json

import httpx
from pydantic import ValidationError

from gateway.domain.exceptions import MissingContentTypeError, TransportError, UploadError
from gateway.schemas.upload import UploadApiResponse, UploadResult
from gateway.shared.telemetry.logging import get_logger
from gateway.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)

UPLOAD_ENDPOINT = "https://scheduler.wavespeed.ai/api/v1/files/upload/binary"


class UploadRelay:
    """Sends a buffered upload to the storage API and normalizes the reply."""

    def __init__(
        self, http_client: httpx.AsyncClient, upload_url: str = UPLOAD_ENDPOINT
    ) -> None:
        self.http_client = http_client
        self.upload_url = upload_url

    @traced("storage.relay_upload")
    async def relay(self, body: bytes, content_type: str, api_key: str) -> UploadResult:
        """Forward body to the storage API.

        Args:
            body: Fully buffered request body.
            content_type: Original Content-Type header, forwarded unchanged.
            api_key: Storage API key (sent as a bearer token).

        Returns:
            UploadResult with the stored file's path.

        Raises:
            MissingContentTypeError: content_type is empty.
            UploadError: The storage API reported a failure.
            TransportError: Connection failure, timeout or non-JSON reply.
        """
        if not content_type:
            raise MissingContentTypeError()
        add_span_attributes(upload_bytes=len(body))
        try:
            response = await self.http_client.post(
                self.upload_url,
                content=body,
                headers={
                    "Content-Type": content_type,
                    "Authorization": f"Bearer {api_key}",
                },
            )
        except httpx.HTTPError as e:
            logger.error("Upload relay transport failure: %s", type(e).__name__)
            raise TransportError(
                f"Could not reach upload API: {type(e).__name__}", upstream="upload"
            ) from e

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "Upload API returned unparseable body: status=%d", response.status_code
            )
            raise TransportError("Invalid response from upload API", upstream="upload") from e

        try:
            result = UploadApiResponse.model_validate(payload)
        except ValidationError as e:
            logger.error(
                "Upload API returned unexpected shape: status=%d", response.status_code
            )
            raise UploadError() from e

        if not result.is_success():
            logger.warning(
                "Upload rejected by storage API: status=%d code=%s",
                response.status_code,
                result.code,
            )
            raise UploadError(result.message or "Upload failed")
        return UploadResult(url=result.full_path)
