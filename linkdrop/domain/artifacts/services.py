"""
Artifact Services

Domain service for artifact record management.
"""

from datetime import datetime
from typing import Callable, List, Optional

from ..errors import ArtifactExpiredError, ArtifactNotFoundError
from .entities import ArtifactRecord, utc_now
from .repositories import ArtifactRepository
from .value_objects import ExpiryPolicy


class ArtifactStore:
    """
    Domain service for artifact metadata.

    Creates records (hashing passwords, computing expiry), looks them up,
    and performs the guarded download-count increment.
    """

    def __init__(
        self,
        artifact_repository: ArtifactRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize ArtifactStore with repository.

        Args:
            artifact_repository: Repository for artifact persistence
            clock: Returns the current time; injectable for tests
        """
        self.artifact_repo = artifact_repository
        self.clock = clock

    def create_record(
        self,
        storage_key: str,
        original_name: str,
        size: int,
        owner_id: Optional[str],
        password_plain: Optional[str] = None,
        expires_in_hours: Optional[float] = None,
        download_limit: Optional[int] = None,
        content_type: Optional[str] = None,
    ) -> ArtifactRecord:
        """
        Create and persist a new artifact record.

        Args:
            storage_key: Blob reference in external storage
            original_name: Name of the uploaded file
            size: Size in bytes
            owner_id: Uploader identity, None if anonymous
            password_plain: Optional password (hashed, never stored as-is)
            expires_in_hours: Optional lifetime
            download_limit: Optional download quota
            content_type: MIME type

        Returns:
            The persisted ArtifactRecord

        Raises:
            ValidationError: If the expiry options are invalid
            PersistenceError: If saving fails
        """
        policy = ExpiryPolicy(
            expires_in_hours=expires_in_hours, download_limit=download_limit
        )
        record = ArtifactRecord.create(
            storage_key=storage_key,
            original_name=original_name,
            size=size,
            owner_id=owner_id,
            password_plain=password_plain,
            expires_in_hours=policy.expires_in_hours,
            download_limit=policy.download_limit,
            content_type=content_type,
            now=self.clock(),
        )
        self.artifact_repo.save(record)
        return record

    def find_record(self, artifact_id: str) -> Optional[ArtifactRecord]:
        """Look up a record, returning None when absent."""
        if not artifact_id:
            return None
        return self.artifact_repo.get(artifact_id)

    def get_record(self, artifact_id: str) -> ArtifactRecord:
        """
        Retrieve a record by id.

        Raises:
            ArtifactNotFoundError: If it does not exist
        """
        record = self.find_record(artifact_id)
        if record is None:
            raise ArtifactNotFoundError(f"Artifact not found: {artifact_id}")
        return record

    def record_successful_download(self, artifact_id: str) -> int:
        """
        Count one download against the artifact's quota.

        Returns:
            The new download count

        Raises:
            ArtifactExpiredError: If the quota was used up by a concurrent
                request between the access check and this call
            ArtifactNotFoundError: If the record disappeared
        """
        new_count = self.artifact_repo.increment_download_count(artifact_id)
        if new_count is None:
            raise ArtifactExpiredError(f"Download quota exhausted: {artifact_id}")
        return new_count

    def list_by_owner(self, owner_id: str) -> List[ArtifactRecord]:
        return self.artifact_repo.list_by_owner(owner_id)

    def delete_record(self, artifact_id: str) -> bool:
        """
        Remove a record's metadata.

        Deleting the blob is left to the caller.
        """
        return self.artifact_repo.delete(artifact_id)

    def find_expired(self, now: Optional[datetime] = None) -> List[ArtifactRecord]:
        return self.artifact_repo.find_expired(now or self.clock())
