"""
Blob Storage Configuration

Selects the blob storage backend and builds the GCS client when needed.
"""

import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class StorageConfig:
    """Blob storage configuration settings."""

    def __init__(self):
        self.backend = os.getenv("STORAGE_BACKEND", "local").strip().lower()
        self.upload_dir = os.getenv("UPLOAD_DIR", "/tmp/linkdrop/uploads")
        self.gcs_bucket_name = os.getenv("GCS_BUCKET_NAME")
        self.credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        self.download_url_ttl_seconds = int(os.getenv("DOWNLOAD_URL_TTL_SECONDS", 300))
        self.max_upload_bytes = int(os.getenv("MAX_UPLOAD_BYTES", 1024 ** 3))

    @property
    def uses_gcs(self) -> bool:
        return self.backend == "gcs"


def build_gcs_client(config: StorageConfig) -> storage.Client:
    """
    Create a GCS client.

    Uses the service account file when GOOGLE_APPLICATION_CREDENTIALS points
    at one (needed for URL signing), else application default credentials.
    """
    if config.credentials_path and os.path.exists(config.credentials_path):
        credentials = service_account.Credentials.from_service_account_file(
            config.credentials_path
        )
        logger.info(f"GCS client initialized with service account: {config.credentials_path}")
        return storage.Client(credentials=credentials, project=credentials.project_id)

    logger.info("GCS client initialized with default credentials")
    return storage.Client()


def describe_backend(config: Optional[StorageConfig] = None) -> str:
    config = config or StorageConfig()
    if config.uses_gcs:
        return f"gcs://{config.gcs_bucket_name}"
    return f"file://{config.upload_dir}"
