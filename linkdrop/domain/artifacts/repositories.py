"""
Artifact Repositories

Repository interface for artifact metadata persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import ArtifactRecord


class ArtifactRepository(ABC):
    """Abstract repository interface for artifact metadata persistence."""

    @abstractmethod
    def save(self, record: ArtifactRecord) -> None:
        """
        Persist a new artifact record and index it under its owner.

        Args:
            record: ArtifactRecord to save

        Raises:
            PersistenceError: If the record cannot be stored
        """
        pass

    @abstractmethod
    def get(self, artifact_id: str) -> Optional[ArtifactRecord]:
        """
        Retrieve a record by id.

        Returns:
            ArtifactRecord if found, None otherwise
        """
        pass

    @abstractmethod
    def increment_download_count(self, artifact_id: str) -> Optional[int]:
        """
        Atomically increment the download counter if quota remains.

        The check ``download_count < download_limit`` and the increment
        happen as one operation at the storage layer, so concurrent callers
        cannot push the counter past the limit.

        Args:
            artifact_id: Artifact identifier

        Returns:
            The new download count, or None if the quota was already
            exhausted

        Raises:
            ArtifactNotFoundError: If the record does not exist
            PersistenceError: If the storage layer fails
        """
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[ArtifactRecord]:
        """
        List an owner's records, newest first.

        Records that no longer exist are skipped. Anonymous uploads have
        no owner and are never listed.
        """
        pass

    @abstractmethod
    def delete(self, artifact_id: str) -> bool:
        """
        Delete a record and its owner index entry.

        Returns:
            True if a record was removed, False if it did not exist
        """
        pass

    @abstractmethod
    def find_expired(self, now: datetime) -> List[ArtifactRecord]:
        """
        Find records that are expired by time or by quota.

        Used by the periodic sweep.
        """
        pass
