"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, metrics) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (artifact id or short id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class ArtifactUploadedEvent(DomainEvent):
    """
    Event emitted when an upload has been stored and linked.

    Attributes:
        owner_id: Uploader identity, None if anonymous
        size: Size in bytes
        has_password: Whether a password gate is set
        short_id: Short id minted for the upload
    """
    owner_id: Optional[str]
    size: int
    has_password: bool
    short_id: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "owner_id": self.owner_id,
            "size": self.size,
            "has_password": self.has_password,
            "short_id": self.short_id,
        })
        return base_dict


@dataclass(frozen=True)
class ShortLinkCreatedEvent(DomainEvent):
    """Event emitted when a short id is minted."""
    target_url: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["target_url"] = self.target_url
        return base_dict


@dataclass(frozen=True)
class DownloadGrantedEvent(DomainEvent):
    """
    Event emitted after the counter was incremented and a handle issued.

    Attributes:
        download_count: Counter value after this grant
        download_limit: Quota, if any
        handle_expires_at: Expiry of the retrieval handle
    """
    download_count: int
    download_limit: Optional[int]
    handle_expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "download_count": self.download_count,
            "download_limit": self.download_limit,
            "handle_expires_at": self.handle_expires_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class AccessDeniedEvent(DomainEvent):
    """
    Event emitted when the access gate denies a request.

    Attributes:
        reason: DenialReason value
        path: 'metadata' or 'download'
    """
    reason: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({"reason": self.reason, "path": self.path})
        return base_dict


@dataclass(frozen=True)
class ArtifactDeletedEvent(DomainEvent):
    """
    Event emitted when an artifact record (and its blob) is removed.

    Attributes:
        cause: 'owner', 'sweep' or 'rollback'
        blob_deleted: Whether the blob delete succeeded
    """
    cause: str
    blob_deleted: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({"cause": self.cause, "blob_deleted": self.blob_deleted})
        return base_dict
