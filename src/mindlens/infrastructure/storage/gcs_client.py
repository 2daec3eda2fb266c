"""
Google Cloud Storage Client

Stores encrypted assessment records and face scans in a GCS bucket.
The google-cloud-storage SDK is blocking, so calls run in a worker
thread to keep the event loop free.

SECURITY: Only ciphertext is uploaded. Bucket-level CMEK is expected
to be configured out of band.
"""

import asyncio
from typing import Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import storage
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from mindlens.config import get_settings
from mindlens.config.logging_config import get_logger
from mindlens.domain.errors import StorageUploadError
from mindlens.infrastructure.storage.client import StorageClient, UploadReceipt

logger = get_logger(__name__)

_TRANSIENT_ERRORS = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.TooManyRequests,
    gcp_exceptions.InternalServerError,
    gcp_exceptions.GatewayTimeout,
)


class GCSStorageClient(StorageClient):
    """
    Google Cloud Storage implementation.

    Usage:
        client = GCSStorageClient()
        receipt = await client.upload("assessments/MS-1/data.enc", data, {})
    """

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        project_id: Optional[str] = None,
        retry_attempts: Optional[int] = None,
    ) -> None:
        settings = get_settings()

        self._bucket_name = bucket_name or settings.storage.bucket_name
        self._project_id = project_id or settings.storage.project_id
        self._retry_attempts = retry_attempts or settings.storage.retry_attempts
        self._client: Optional[storage.Client] = None

    @property
    def backend_name(self) -> str:
        return "gcs"

    def locator_for(self, locator_hint: str) -> str:
        return f"gs://{self._bucket_name}/{locator_hint}"

    def _get_bucket(self) -> storage.Bucket:
        if self._client is None:
            self._client = storage.Client(project=self._project_id)
        return self._client.bucket(self._bucket_name)

    def _put(
        self,
        locator_hint: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict[str, str]],
    ) -> None:
        @retry(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            reraise=True,
        )
        def _attempt() -> None:
            blob = self._get_bucket().blob(locator_hint)
            if metadata:
                blob.metadata = metadata
            blob.upload_from_string(data, content_type=content_type)

        _attempt()

    async def _upload(
        self,
        locator_hint: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> UploadReceipt:
        locator = self.locator_for(locator_hint)
        try:
            await asyncio.to_thread(self._put, locator_hint, data, content_type, metadata)
        except gcp_exceptions.GoogleAPICallError as e:
            logger.error("GCS upload failed", locator=locator, error=str(e))
            raise StorageUploadError(locator_hint, str(e), original_error=e) from e
        except Exception as e:
            logger.error("Unexpected GCS error", locator=locator, error_type=type(e).__name__)
            raise StorageUploadError(locator_hint, f"unexpected error: {e}", original_error=e) from e

        logger.info("Encrypted object uploaded", locator=locator, size=len(data))
        return UploadReceipt(locator=locator, size_bytes=len(data), metadata=dict(metadata or {}))

    async def upload(
        self,
        locator_hint: str,
        encrypted_bytes: bytes,
        metadata: dict[str, str],
    ) -> UploadReceipt:
        return await self._upload(locator_hint, encrypted_bytes, "application/octet-stream", metadata)

    async def upload_blob(
        self,
        locator_hint: str,
        blob: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadReceipt:
        return await self._upload(locator_hint, blob, content_type)

    async def delete(self, locator: str) -> bool:
        prefix = f"gs://{self._bucket_name}/"
        if not locator.startswith(prefix):
            return False
        path = locator[len(prefix):]

        def _delete() -> bool:
            try:
                self._get_bucket().blob(path).delete()
                return True
            except gcp_exceptions.NotFound:
                return False

        return await asyncio.to_thread(_delete)
