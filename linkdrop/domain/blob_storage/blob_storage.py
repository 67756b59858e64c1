"""
Blob Storage Interface

Abstract interface for the external object store that holds uploaded
bytes. The domain only ever refers to a blob by its opaque storage key.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional


@dataclass(frozen=True)
class RetrievalHandle:
    """
    Time-limited reference that lets a client fetch a blob directly.

    Attributes:
        url: Pre-signed URL
        expires_at: When the URL stops working
    """
    url: str
    expires_at: datetime

    def to_dict(self) -> dict:
        return {"url": self.url, "expires_at": self.expires_at.isoformat()}


class IBlobStorage(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - delete() and exists() are idempotent and safe to call repeatedly
    - get() returns None for missing blobs instead of raising
    - Failures of the backing store raise UpstreamStorageError
    """

    @abstractmethod
    def save(self, storage_key: str, content: BinaryIO, content_type: Optional[str] = None) -> int:
        """
        Store blob content under a key.

        Args:
            storage_key: Key for the blob (e.g. 'uploads/<uuid>/report.pdf')
            content: Binary stream positioned at the start
            content_type: Optional MIME type

        Returns:
            Number of bytes stored

        Raises:
            ValueError: If storage_key is empty
            UpstreamStorageError: If the write fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, storage_key: str) -> Optional[BinaryIO]:
        """
        Open a blob for reading.

        The caller must close the returned stream.
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, storage_key: str) -> bool:
        """
        Delete a blob. Deleting a missing blob returns True.

        Raises:
            UpstreamStorageError: If the delete fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, storage_key: str) -> bool:
        pass  # pragma: no cover

    @abstractmethod
    def generate_signed_url(
        self,
        storage_key: str,
        ttl_seconds: int,
        download_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RetrievalHandle:
        """
        Create a short-lived retrieval handle for a blob.

        Args:
            storage_key: Blob key
            ttl_seconds: Lifetime of the handle
            download_name: Filename for the attachment Content-Disposition
            content_type: MIME type to serve the blob with

        Returns:
            RetrievalHandle

        Raises:
            UpstreamStorageError: If signing fails
        """
        pass  # pragma: no cover

    def path_for(self, storage_key: str) -> Optional[Path]:
        """
        Local filesystem path of an existing blob.

        Only backends served through the application's own blob endpoint
        have one; the rest return None.
        """
        return None

    def health_check(self) -> bool:
        """Report whether the backing store is reachable."""
        return True
