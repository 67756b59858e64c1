"""
Local Blob Storage Implementation

Concrete implementation of IBlobStorage on the local filesystem. Retrieval
handles are HMAC-signed URLs served by the application's own blob
endpoint.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from linkdrop.domain.blob_storage.blob_storage import IBlobStorage, RetrievalHandle
from linkdrop.domain.blob_storage.signed_url_service import SignedUrlService
from linkdrop.domain.errors import UpstreamStorageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalBlobStorage(IBlobStorage):
    """
    Local filesystem implementation of IBlobStorage.

    Attributes:
        base_path: Root directory for stored blobs
        signed_url_service: Signs retrieval URLs for the blob endpoint
    """

    def __init__(self, base_path: str, signed_url_service: SignedUrlService):
        """
        Args:
            base_path: Base directory for blob storage (created if missing)
            signed_url_service: Service used to sign retrieval URLs
        """
        self.base_path = Path(base_path).resolve()
        self.signed_url_service = signed_url_service
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise UpstreamStorageError(
                f"Failed to create storage directory: {self.base_path}", original_error=e
            ) from e

    def _resolve(self, storage_key: str) -> Path:
        """
        Map a storage key to a path inside base_path.

        Raises:
            ValueError: If the key is empty or escapes the storage root
        """
        if not storage_key or not storage_key.strip():
            raise ValueError("storage_key cannot be empty")
        full_path = (self.base_path / storage_key).resolve()
        if full_path != self.base_path and self.base_path not in full_path.parents:
            raise ValueError(f"storage_key escapes storage root: {storage_key!r}")
        return full_path

    def save(self, storage_key: str, content: BinaryIO, content_type: Optional[str] = None) -> int:
        full_path = self._resolve(storage_key)
        written = 0
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            if hasattr(content, "seek"):
                content.seek(0)
            with open(full_path, "wb") as f:
                # Read and write in chunks for memory efficiency
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    written += len(chunk)
        except OSError as e:
            # Drop the partial file
            full_path.unlink(missing_ok=True)
            raise UpstreamStorageError(f"Failed to save blob {storage_key}", original_error=e) from e
        return written

    def get(self, storage_key: str) -> Optional[BinaryIO]:
        try:
            full_path = self._resolve(storage_key)
        except ValueError:
            return None
        if not full_path.is_file():
            return None
        try:
            return open(full_path, "rb")
        except OSError as e:
            logger.warning(f"Could not open blob {storage_key}: {e}")
            return None

    def path_for(self, storage_key: str) -> Optional[Path]:
        """Absolute path of an existing blob, for streaming with send_file."""
        try:
            full_path = self._resolve(storage_key)
        except ValueError:
            return None
        return full_path if full_path.is_file() else None

    def delete(self, storage_key: str) -> bool:
        try:
            full_path = self._resolve(storage_key)
        except ValueError:
            return True  # Idempotent - invalid key treated as success
        try:
            full_path.unlink(missing_ok=True)
        except OSError as e:
            raise UpstreamStorageError(f"Failed to delete blob {storage_key}", original_error=e) from e

        # Remove the now-empty per-upload directory
        parent = full_path.parent
        if parent != self.base_path:
            try:
                parent.rmdir()
            except OSError:
                pass
        return True

    def exists(self, storage_key: str) -> bool:
        return self.path_for(storage_key) is not None

    def generate_signed_url(
        self,
        storage_key: str,
        ttl_seconds: int,
        download_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RetrievalHandle:
        if not self.exists(storage_key):
            raise UpstreamStorageError(f"Blob not found: {storage_key}")
        return self.signed_url_service.generate_signed_url(
            storage_key, ttl_seconds=ttl_seconds, download_name=download_name
        )

    def health_check(self) -> bool:
        return self.base_path.is_dir()
