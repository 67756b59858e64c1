"""
Storage Factory

Factory for creating the blob storage implementation selected by
configuration. The application layer only sees IBlobStorage.
"""

import logging
from typing import Optional

from linkdrop.config.storage_config import StorageConfig, build_gcs_client
from linkdrop.domain.blob_storage.blob_storage import IBlobStorage
from linkdrop.domain.blob_storage.signed_url_service import SignedUrlService

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory that returns the configured blob storage backend."""

    @staticmethod
    def create_storage(
        config: Optional[StorageConfig] = None,
        signed_url_service: Optional[SignedUrlService] = None,
    ) -> IBlobStorage:
        """
        Create the blob storage backend.

        Environment Variables:
            STORAGE_BACKEND: 'local' (default) or 'gcs'
            UPLOAD_DIR: Base directory for local storage
            GCS_BUCKET_NAME: Bucket for the gcs backend

        Raises:
            RuntimeError: If the backend cannot be initialized
        """
        config = config or StorageConfig()
        if config.uses_gcs:
            return StorageFactory._create_gcs_storage(config)
        return StorageFactory._create_local_storage(config, signed_url_service or SignedUrlService())

    @staticmethod
    def _create_local_storage(config: StorageConfig, signed_url_service: SignedUrlService) -> IBlobStorage:
        from linkdrop.infrastructure.local_blob_storage import LocalBlobStorage

        try:
            storage = LocalBlobStorage(config.upload_dir, signed_url_service)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e
        logger.info(f"Storage factory: using local filesystem storage at {config.upload_dir}")
        return storage

    @staticmethod
    def _create_gcs_storage(config: StorageConfig) -> IBlobStorage:
        from linkdrop.infrastructure.gcs_blob_storage import GCSBlobStorage

        if not config.gcs_bucket_name:
            raise RuntimeError("GCS_BUCKET_NAME must be set when STORAGE_BACKEND=gcs")
        try:
            storage = GCSBlobStorage(config.gcs_bucket_name, client=build_gcs_client(config))
        except Exception as e:
            raise RuntimeError(f"Failed to initialize GCS storage: {e}") from e
        logger.info(f"Storage factory: using GCS bucket {config.gcs_bucket_name}")
        return storage
