"""
Google Cloud Storage Blob Implementation

Concrete implementation of IBlobStorage backed by a GCS bucket, using
v4 pre-signed URLs as retrieval handles.
"""

import logging
from datetime import timedelta
from typing import BinaryIO, Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from linkdrop.domain.artifacts.entities import utc_now
from linkdrop.domain.blob_storage.blob_storage import IBlobStorage, RetrievalHandle
from linkdrop.domain.errors import UpstreamStorageError

logger = logging.getLogger(__name__)


def content_disposition(download_name: str) -> str:
    """Attachment header value with an ASCII fallback and RFC 5987 name."""
    from urllib.parse import quote

    ascii_name = download_name.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(download_name)}"


class GCSBlobStorage(IBlobStorage):
    """
    Google Cloud Storage implementation of IBlobStorage.

    Thread Safety:
        The GCS client handles concurrent operations safely.

    Attributes:
        bucket_name: Name of the GCS bucket for blob storage
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(self, bucket_name: str, client: Optional[storage.Client] = None):
        """
        Args:
            bucket_name: Name of the GCS bucket to use for storage
            client: Pre-built client (defaults to application default credentials)

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def save(self, storage_key: str, content: BinaryIO, content_type: Optional[str] = None) -> int:
        if not storage_key or not storage_key.strip():
            raise ValueError("storage_key cannot be empty")
        try:
            blob = self.bucket.blob(storage_key)
            if hasattr(content, "seek"):
                content.seek(0)
            blob.upload_from_file(content, content_type=content_type)
            return blob.size or 0
        except GoogleCloudError as e:
            raise UpstreamStorageError(f"Failed to save blob {storage_key} to GCS", original_error=e) from e

    def get(self, storage_key: str) -> Optional[BinaryIO]:
        from io import BytesIO

        if not storage_key or not storage_key.strip():
            return None
        try:
            content = BytesIO()
            self.bucket.blob(storage_key).download_to_file(content)
            content.seek(0)
            return content
        except NotFound:
            return None
        except GoogleCloudError as e:
            logger.warning(f"Could not read blob {storage_key} from GCS: {e}")
            return None

    def delete(self, storage_key: str) -> bool:
        if not storage_key or not storage_key.strip():
            return True  # Idempotent - invalid key treated as success
        try:
            self.bucket.blob(storage_key).delete()
            return True
        except NotFound:
            return True
        except GoogleCloudError as e:
            raise UpstreamStorageError(f"Failed to delete blob {storage_key} from GCS", original_error=e) from e

    def exists(self, storage_key: str) -> bool:
        if not storage_key or not storage_key.strip():
            return False
        try:
            return self.bucket.blob(storage_key).exists()
        except GoogleCloudError:
            return False

    def generate_signed_url(
        self,
        storage_key: str,
        ttl_seconds: int,
        download_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RetrievalHandle:
        """
        Generate a v4 signed GET URL.

        Signing happens locally with the service account key; it does not
        check that the blob exists.
        """
        issued_at = utc_now()
        kwargs = {
            "version": "v4",
            "expiration": timedelta(seconds=ttl_seconds),
            "method": "GET",
        }
        if download_name:
            kwargs["response_disposition"] = content_disposition(download_name)
        if content_type:
            kwargs["response_type"] = content_type

        try:
            url = self.bucket.blob(storage_key).generate_signed_url(**kwargs)
        except (GoogleCloudError, AttributeError, ValueError) as e:
            # AttributeError/ValueError: credentials that cannot sign
            raise UpstreamStorageError(f"Failed to sign URL for {storage_key}", original_error=e) from e

        return RetrievalHandle(url=url, expires_at=issued_at + timedelta(seconds=ttl_seconds))

    def health_check(self) -> bool:
        try:
            return self.bucket.exists()
        except GoogleCloudError as e:
            logger.warning(f"GCS health check failed: {e}")
            return False
