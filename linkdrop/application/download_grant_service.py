"""
Download Grant Service

Turns a permitted download into a retrieval handle.
"""

import logging
from dataclasses import dataclass

from linkdrop.domain.artifacts import ArtifactRecord, ArtifactStore
from linkdrop.domain.blob_storage import IBlobStorage, RetrievalHandle
from linkdrop.domain.events import DownloadGrantedEvent

from .event_publisher import EventPublisher

logger = logging.getLogger(__name__)

DEFAULT_HANDLE_TTL_SECONDS = 300


@dataclass(frozen=True)
class DownloadGrant:
    """A counted download and the handle to fetch it with."""
    handle: RetrievalHandle
    name: str
    download_count: int

    def to_dict(self) -> dict:
        return {"url": self.handle.url, "name": self.name}


class DownloadGrantService:
    """
    Issues retrieval handles for permitted downloads.

    The download is counted before the handle is signed. A client that
    never uses its handle has still consumed one download.
    """

    def __init__(
        self,
        artifact_store: ArtifactStore,
        blob_storage: IBlobStorage,
        event_publisher: EventPublisher,
        handle_ttl_seconds: int = DEFAULT_HANDLE_TTL_SECONDS,
    ):
        self.artifact_store = artifact_store
        self.blob_storage = blob_storage
        self.event_publisher = event_publisher
        self.handle_ttl_seconds = handle_ttl_seconds

    def issue_grant(self, record: ArtifactRecord) -> DownloadGrant:
        """
        Count a download and sign a retrieval handle.

        Must only be called after the access gate permitted the request.

        Args:
            record: Artifact being downloaded

        Returns:
            DownloadGrant

        Raises:
            ArtifactExpiredError: If a concurrent request used the last download
            ArtifactNotFoundError: If the record vanished
            UpstreamStorageError: If signing fails (the download stays counted)
        """
        download_count = self.artifact_store.record_successful_download(record.id)

        handle = self.blob_storage.generate_signed_url(
            record.storage_key,
            ttl_seconds=self.handle_ttl_seconds,
            download_name=record.original_name,
            content_type=record.content_type,
        )

        self.event_publisher.publish(
            DownloadGrantedEvent(
                aggregate_id=record.id,
                occurred_at=self.artifact_store.clock(),
                download_count=download_count,
                download_limit=record.download_limit,
                handle_expires_at=handle.expires_at,
            )
        )
        return DownloadGrant(handle=handle, name=record.original_name, download_count=download_count)
