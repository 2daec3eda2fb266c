"""
Storage Client Abstract Interface

Narrow contract for storing encrypted objects. Callers only ever hand
ciphertext to storage; plaintext never crosses this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class UploadReceipt:
    """
    Receipt returned by a successful upload.

    Attributes:
        locator: Fully-qualified object locator (e.g. gs://bucket/path)
        size_bytes: Number of bytes stored
        metadata: Metadata attached to the object
    """

    locator: str
    size_bytes: int = 0
    metadata: dict[str, str] = field(default_factory=dict)


class StorageClient(ABC):
    """
    Abstract encrypted-object storage.

    Implementations raise StorageUploadError on failure.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend name for logging/metrics."""
        pass

    @abstractmethod
    def locator_for(self, locator_hint: str) -> str:
        """Fully-qualified locator an upload under this hint is stored at."""
        pass

    @abstractmethod
    async def upload(
        self,
        locator_hint: str,
        encrypted_bytes: bytes,
        metadata: dict[str, str],
    ) -> UploadReceipt:
        """
        Store an encrypted record.

        Args:
            locator_hint: Object path within the store
            encrypted_bytes: Ciphertext to store
            metadata: Non-sensitive object metadata

        Returns:
            UploadReceipt with the final locator
        """
        pass

    @abstractmethod
    async def upload_blob(
        self,
        locator_hint: str,
        blob: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadReceipt:
        """Store an (already encrypted) binary blob."""
        pass

    @abstractmethod
    async def delete(self, locator: str) -> bool:
        """
        Delete an object.

        Returns:
            True if an object was deleted
        """
        pass
