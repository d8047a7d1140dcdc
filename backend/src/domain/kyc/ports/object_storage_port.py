"""KYC Document Storage Port - Domain interface for the private document bucket.

Adapters must implement this interface to provide S3, MinIO, or other storage
backends for seller KYC documents.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Raised by storage adapters when a storage call fails."""
    pass


class KYCStoragePort(ABC):
    """Port interface for the KYC document bucket.

    Storage paths are computed by the caller; the port only moves bytes and
    issues URLs.

    Example Usage:
        storage = S3KYCStorageAdapter(...)

        await storage.upload(
            path="seller-1/id_document_1735000000000.pdf",
            data=b"...",
            content_type="application/pdf",
            upsert=True,
        )
        url = await storage.create_signed_url(path, ttl_seconds=3600)
    """

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        upsert: bool = True,
    ) -> None:
        """Store bytes under `path`.

        Args:
            path: Object key inside the KYC bucket
            data: File content
            content_type: MIME type stored with the object
            upsert: Overwrite an existing object at the same path

        Raises:
            StorageError: If the upload fails or the object exists and
                upsert is False
        """
        pass

    @abstractmethod
    async def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        """Issue a time-limited read URL for a private object.

        Raises:
            StorageError: If URL generation fails
        """
        pass

    @abstractmethod
    def get_public_url(self, path: str) -> Optional[str]:
        """Return the public URL of an object, or None if the bucket has none."""
        pass
