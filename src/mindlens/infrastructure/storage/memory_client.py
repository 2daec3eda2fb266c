"""
In-Memory Storage Client

Dict-backed storage for tests and local development.
Each instance owns its own store.
"""

from dataclasses import dataclass, field
from typing import Optional

from mindlens.config.logging_config import get_logger
from mindlens.domain.errors import StorageUploadError
from mindlens.infrastructure.storage.client import StorageClient, UploadReceipt

logger = get_logger(__name__)


@dataclass
class StoredObject:
    data: bytes
    metadata: dict[str, str] = field(default_factory=dict)
    content_type: str = "application/octet-stream"


class InMemoryStorageClient(StorageClient):
    """
    In-memory storage.

    Args:
        bucket_name: Used to build gs://-style locators
        fail_uploads: Make every upload raise StorageUploadError
    """

    def __init__(self, bucket_name: str = "mindlens-encrypted-data", fail_uploads: bool = False) -> None:
        self._bucket = bucket_name
        self.fail_uploads = fail_uploads
        self.objects: dict[str, StoredObject] = {}

    @property
    def backend_name(self) -> str:
        return "memory"

    def locator_for(self, hint: str) -> str:
        return f"gs://{self._bucket}/{hint}"

    def _store(self, hint: str, obj: StoredObject) -> UploadReceipt:
        if self.fail_uploads:
            raise StorageUploadError(hint, "simulated storage outage")
        locator = self.locator_for(hint)
        self.objects[locator] = obj
        logger.debug("Stored object in memory", locator=locator, size=len(obj.data))
        return UploadReceipt(locator=locator, size_bytes=len(obj.data), metadata=dict(obj.metadata))

    async def upload(
        self,
        locator_hint: str,
        encrypted_bytes: bytes,
        metadata: dict[str, str],
    ) -> UploadReceipt:
        return self._store(locator_hint, StoredObject(data=bytes(encrypted_bytes), metadata=dict(metadata)))

    async def upload_blob(
        self,
        locator_hint: str,
        blob: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadReceipt:
        return self._store(locator_hint, StoredObject(data=bytes(blob), content_type=content_type))

    async def delete(self, locator: str) -> bool:
        return self.objects.pop(locator, None) is not None

    def get(self, locator: str) -> Optional[StoredObject]:
        return self.objects.get(locator)
