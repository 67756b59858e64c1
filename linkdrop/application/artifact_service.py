"""
Artifact Service

Application service for the recipient-facing and owner-facing artifact
operations. Every access decision goes through the access gate.
"""

import logging
from typing import List

from linkdrop.domain.artifacts import ArtifactRecord, ArtifactStore, evaluate
from linkdrop.domain.blob_storage import IBlobStorage
from linkdrop.domain.errors import ArtifactNotFoundError, DomainError, OwnershipError
from linkdrop.domain.events import AccessDeniedEvent, ArtifactDeletedEvent

from .download_grant_service import DownloadGrant, DownloadGrantService
from .event_publisher import EventPublisher
from .identity_resolver import Identity
from .requests import DownloadRequest

logger = logging.getLogger(__name__)


class ArtifactService:
    """
    Coordinates metadata reads, downloads, listings and deletes.
    """

    def __init__(
        self,
        artifact_store: ArtifactStore,
        grant_service: DownloadGrantService,
        blob_storage: IBlobStorage,
        event_publisher: EventPublisher,
    ):
        self.artifact_store = artifact_store
        self.grant_service = grant_service
        self.blob_storage = blob_storage
        self.event_publisher = event_publisher

    def get_metadata(self, artifact_id: str) -> dict:
        """
        Public metadata for the download page.

        The password is not checked here; expired artifacts reveal
        nothing about the file.

        Returns:
            {id, name, size, hasPassword}

        Raises:
            ArtifactNotFoundError: Unknown id
            ArtifactExpiredError: Past expiry or quota
        """
        record = self.artifact_store.find_record(artifact_id)
        decision = evaluate(record, self.artifact_store.clock(), check_password=False)
        if decision.denied:
            self._publish_denial(artifact_id, decision.reason.value, "metadata")
            decision.raise_if_denied(artifact_id)

        return {
            "id": record.id,
            "name": record.original_name,
            "size": record.size,
            "hasPassword": record.has_password,
        }

    def request_download(self, artifact_id: str, request: DownloadRequest) -> DownloadGrant:
        """
        Run the full access gate and, on permit, issue a download grant.

        Raises:
            ArtifactNotFoundError: Unknown id
            ArtifactExpiredError: Past expiry or quota, including losing a
                race for the last download
            IncorrectPasswordError: Missing or wrong password
        """
        record = self.artifact_store.find_record(artifact_id)
        decision = evaluate(
            record, self.artifact_store.clock(), supplied_password=request.password
        )
        if decision.denied:
            self._publish_denial(artifact_id, decision.reason.value, "download")
            decision.raise_if_denied(artifact_id)

        return self.grant_service.issue_grant(record)

    def list_for_owner(self, identity: Identity) -> List[dict]:
        """Summaries of the caller's artifacts, newest first."""
        now = self.artifact_store.clock()
        return [
            record.to_summary(now)
            for record in self.artifact_store.list_by_owner(identity.owner_id)
        ]

    def delete_for_owner(self, identity: Identity, artifact_id: str) -> None:
        """
        Delete an artifact and its blob on behalf of its owner.

        Raises:
            ArtifactNotFoundError: Unknown id
            OwnershipError: Caller does not own the artifact
        """
        record = self.artifact_store.get_record(artifact_id)
        if record.owner_id != identity.owner_id:
            raise OwnershipError(
                f"{identity.owner_id} may not delete artifact {artifact_id}"
            )
        self.remove(record, cause="owner")

    def remove(self, record: ArtifactRecord, cause: str) -> bool:
        """
        Remove a record, then its blob.

        A failed blob delete is logged; the record is gone either way so
        the artifact is no longer reachable.

        Returns:
            Whether the blob was deleted
        """
        if not self.artifact_store.delete_record(record.id):
            raise ArtifactNotFoundError(f"Artifact not found: {record.id}")

        try:
            blob_deleted = self.blob_storage.delete(record.storage_key)
        except DomainError as e:
            logger.error(f"Failed to delete blob {record.storage_key}: {e}")
            blob_deleted = False

        self.event_publisher.publish(
            ArtifactDeletedEvent(
                aggregate_id=record.id,
                occurred_at=self.artifact_store.clock(),
                cause=cause,
                blob_deleted=blob_deleted,
            )
        )
        return blob_deleted

    def _publish_denial(self, artifact_id: str, reason: str, path: str) -> None:
        self.event_publisher.publish(
            AccessDeniedEvent(
                aggregate_id=artifact_id or "",
                occurred_at=self.artifact_store.clock(),
                reason=reason,
                path=path,
            )
        )
