"""Storage adapters: relay of uploaded files to the storage API."""

from gateway.infrastructure.external.storage.upload_relay import UploadRelay

__all__ = ["UploadRelay"]
