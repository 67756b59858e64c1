"""
Upload Service

Application service orchestrating an upload: blob write, artifact record,
short link. Partial failures are compensated so no orphaned record or blob
survives a failed upload.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from werkzeug.utils import secure_filename

from linkdrop.domain.artifacts import ArtifactRecord, ArtifactStore
from linkdrop.domain.blob_storage import IBlobStorage
from linkdrop.domain.errors import DomainError, ValidationError
from linkdrop.domain.events import (
    ArtifactDeletedEvent,
    ArtifactUploadedEvent,
    ShortLinkCreatedEvent,
)
from linkdrop.domain.link_registry import LinkRegistry

from .event_publisher import EventPublisher
from .requests import UploadRequest

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 1024 * 1024 * 1024


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""
    record: ArtifactRecord
    short_id: str
    link: str
    long_url: str

    def to_dict(self) -> dict:
        return {"success": True, "link": self.link, "fileId": self.record.id}


def build_storage_key(filename: str) -> str:
    """Storage keys are 'uploads/<uuid>/<sanitized name>'."""
    safe_name = secure_filename(filename) or "file"
    return f"uploads/{uuid.uuid4().hex}/{safe_name}"


class UploadService:
    """
    Orchestrates uploads.

    Order: store the blob, persist the record, mint the short link.
    A failure at any step removes whatever the earlier steps created.
    """

    def __init__(
        self,
        artifact_store: ArtifactStore,
        link_registry: LinkRegistry,
        blob_storage: IBlobStorage,
        event_publisher: EventPublisher,
        frontend_url: str,
        backend_url: str,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        """
        Args:
            artifact_store: Artifact record store
            link_registry: Short link registry
            blob_storage: Blob store adapter
            event_publisher: Publisher for domain events
            frontend_url: Base URL of the metadata page
            backend_url: Base URL short links are served from
            max_upload_bytes: Upload size cap
        """
        self.artifact_store = artifact_store
        self.link_registry = link_registry
        self.blob_storage = blob_storage
        self.event_publisher = event_publisher
        self.frontend_url = frontend_url.rstrip("/")
        self.backend_url = backend_url.rstrip("/")
        self.max_upload_bytes = max_upload_bytes

    def metadata_page_url(self, artifact_id: str) -> str:
        return f"{self.frontend_url}/download/{artifact_id}"

    def short_url(self, short_id: str) -> str:
        return f"{self.backend_url}/s/{short_id}"

    def upload(self, request: UploadRequest, owner_id: Optional[str]) -> UploadResult:
        """
        Store an upload and create its short link.

        Args:
            request: Validated upload input
            owner_id: Uploader identity ('user:..' or 'guest:..'), or None for
                an anonymous upload

        Returns:
            UploadResult with the short link and artifact id

        Raises:
            ValidationError: If the file is too large
            UpstreamStorageError: If the blob write fails
            PersistenceError: If the record or short link cannot be stored
        """
        storage_key = build_storage_key(request.filename)
        try:
            size = self.blob_storage.save(storage_key, request.stream, request.content_type)
        except DomainError:
            self._discard_blob(storage_key)
            raise

        if size > self.max_upload_bytes:
            self._discard_blob(storage_key)
            raise ValidationError(
                f"Upload of {size} bytes exceeds limit of {self.max_upload_bytes}",
                field="file",
                too_large=True,
            )

        try:
            record = self.artifact_store.create_record(
                storage_key=storage_key,
                original_name=request.filename,
                size=size,
                owner_id=owner_id,
                password_plain=request.password,
                expires_in_hours=request.policy.expires_in_hours,
                download_limit=request.policy.download_limit,
                content_type=request.content_type,
            )
        except DomainError:
            self._discard_blob(storage_key)
            raise

        long_url = self.metadata_page_url(record.id)
        try:
            short_id = self.link_registry.create_short_link(long_url)
        except DomainError:
            logger.error(f"Short link creation failed for artifact {record.id}, rolling back")
            self._rollback(record)
            raise

        now = self.artifact_store.clock()
        self.event_publisher.publish(
            ShortLinkCreatedEvent(aggregate_id=short_id, occurred_at=now, target_url=long_url)
        )
        self.event_publisher.publish(
            ArtifactUploadedEvent(
                aggregate_id=record.id,
                occurred_at=now,
                owner_id=owner_id,
                size=size,
                has_password=record.has_password,
                short_id=short_id,
            )
        )

        return UploadResult(
            record=record,
            short_id=short_id,
            link=self.short_url(short_id),
            long_url=long_url,
        )

    def _rollback(self, record: ArtifactRecord) -> None:
        try:
            self.artifact_store.delete_record(record.id)
        except DomainError as e:
            logger.error(f"Failed to delete orphaned record {record.id}: {e}")
        blob_deleted = self._discard_blob(record.storage_key)
        self.event_publisher.publish(
            ArtifactDeletedEvent(
                aggregate_id=record.id,
                occurred_at=self.artifact_store.clock(),
                cause="rollback",
                blob_deleted=blob_deleted,
            )
        )

    def _discard_blob(self, storage_key: str) -> bool:
        try:
            return self.blob_storage.delete(storage_key)
        except DomainError as e:
            logger.error(f"Failed to delete orphaned blob {storage_key}: {e}")
            return False
