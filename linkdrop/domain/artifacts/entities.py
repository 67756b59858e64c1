"""
Artifact Entities

Domain entity for an uploaded file's metadata record.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .passwords import hash_password

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class ArtifactRecord:
    """
    Entity representing an uploaded file and its access policy.

    Everything except ``download_count`` is immutable after creation.
    ``download_count`` only moves forward, through the repository's
    atomic increment.
    """
    id: str
    storage_key: str
    original_name: str
    size: int
    owner_id: Optional[str]
    created_at: datetime
    password_hash: Optional[str] = None
    expires_at: Optional[datetime] = None
    download_limit: Optional[int] = None
    download_count: int = 0
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def create(
        cls,
        storage_key: str,
        original_name: str,
        size: int,
        owner_id: Optional[str],
        password_plain: Optional[str] = None,
        expires_in_hours: Optional[float] = None,
        download_limit: Optional[int] = None,
        content_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> 'ArtifactRecord':
        """
        Factory method to create a new artifact record.

        Args:
            storage_key: Blob reference in external storage
            original_name: Name of the uploaded file
            size: Size in bytes
            owner_id: Account or guest identity of the uploader, None if anonymous
            password_plain: Optional password; only its hash is kept
            expires_in_hours: Optional lifetime from now
            download_limit: Optional maximum number of downloads
            content_type: MIME type reported by the uploader
            now: Creation time (defaults to current UTC time)

        Returns:
            New ArtifactRecord with a generated id
        """
        now = now or utc_now()
        expires_at = None
        if expires_in_hours is not None:
            expires_at = now + timedelta(hours=expires_in_hours)

        password_hash = None
        if password_plain:
            password_hash = hash_password(password_plain)

        return cls(
            id=uuid.uuid4().hex,
            storage_key=storage_key,
            original_name=original_name,
            size=size,
            owner_id=owner_id,
            created_at=now,
            password_hash=password_hash,
            expires_at=expires_at,
            download_limit=download_limit,
            download_count=0,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
        )

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def is_expired_by_time(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def is_quota_exhausted(self) -> bool:
        return self.download_limit is not None and self.download_count >= self.download_limit

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether the record is logically dead.

        Time expiry and quota exhaustion are treated the same.
        """
        now = now or utc_now()
        return self.is_expired_by_time(now) or self.is_quota_exhausted()

    def remaining_downloads(self) -> Optional[int]:
        if self.download_limit is None:
            return None
        return max(0, self.download_limit - self.download_count)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "storage_key": self.storage_key,
            "original_name": self.original_name,
            "size": self.size,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
            "password_hash": self.password_hash,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "download_limit": self.download_limit,
            "download_count": self.download_count,
            "content_type": self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ArtifactRecord':
        """Create ArtifactRecord from dictionary."""
        return cls(
            id=data["id"],
            storage_key=data["storage_key"],
            original_name=data["original_name"],
            size=int(data["size"]),
            owner_id=data.get("owner_id"),
            created_at=_parse_datetime(data["created_at"]),
            password_hash=data.get("password_hash"),
            expires_at=_parse_datetime(data.get("expires_at")),
            download_limit=data.get("download_limit"),
            download_count=int(data.get("download_count") or 0),
            content_type=data.get("content_type") or DEFAULT_CONTENT_TYPE,
        )

    def to_summary(self, now: Optional[datetime] = None) -> dict:
        """Owner-facing listing entry. Never includes the password hash."""
        return {
            "id": self.id,
            "name": self.original_name,
            "size": self.size,
            "hasPassword": self.has_password,
            "createdAt": self.created_at.isoformat(),
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "downloadLimit": self.download_limit,
            "downloadCount": self.download_count,
            "expired": self.is_expired(now),
        }


def is_expired(record: ArtifactRecord, now: datetime) -> bool:
    return record.is_expired(now)
