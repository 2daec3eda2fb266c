"""Encrypted object storage package."""

from mindlens.infrastructure.storage.client import StorageClient, UploadReceipt
from mindlens.infrastructure.storage.memory_client import InMemoryStorageClient

__all__ = [
    "StorageClient",
    "UploadReceipt",
    "InMemoryStorageClient",
]
