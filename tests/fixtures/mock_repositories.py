"""
Mock Repository Implementations

In-memory implementations of the repository and blob storage interfaces
for unit testing. Each keeps a call history for assertions.
"""

import io
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO, Dict, List, Optional

from linkdrop.domain.accounts import Account, AccountRepository
from linkdrop.domain.artifacts import ArtifactRecord, ArtifactRepository
from linkdrop.domain.blob_storage import IBlobStorage, RetrievalHandle
from linkdrop.domain.errors import ArtifactNotFoundError, UpstreamStorageError
from linkdrop.domain.link_registry import ShortLink, ShortLinkRepository


class FakeClock:
    """Controllable time source for services."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class InMemoryArtifactRepository(ArtifactRepository):
    """
    In-memory ArtifactRepository.

    The conditional increment runs under a lock, matching the atomicity
    of the Redis script.
    """

    def __init__(self):
        self._storage: Dict[str, ArtifactRecord] = {}
        self._lock = threading.Lock()
        self.call_history: List[Dict[str, Any]] = []

    def save(self, record: ArtifactRecord) -> None:
        self.call_history.append({"method": "save", "id": record.id})
        with self._lock:
            self._storage[record.id] = replace(record)

    def get(self, artifact_id: str) -> Optional[ArtifactRecord]:
        self.call_history.append({"method": "get", "id": artifact_id})
        with self._lock:
            record = self._storage.get(artifact_id)
            return replace(record) if record else None

    def increment_download_count(self, artifact_id: str) -> Optional[int]:
        self.call_history.append({"method": "increment_download_count", "id": artifact_id})
        with self._lock:
            record = self._storage.get(artifact_id)
            if record is None:
                raise ArtifactNotFoundError(f"Artifact not found: {artifact_id}")
            if record.is_quota_exhausted():
                return None
            record.download_count += 1
            return record.download_count

    def list_by_owner(self, owner_id: str) -> List[ArtifactRecord]:
        if not owner_id:
            return []
        with self._lock:
            owned = [replace(r) for r in self._storage.values() if r.owner_id == owner_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    def delete(self, artifact_id: str) -> bool:
        self.call_history.append({"method": "delete", "id": artifact_id})
        with self._lock:
            return self._storage.pop(artifact_id, None) is not None

    def find_expired(self, now: datetime) -> List[ArtifactRecord]:
        with self._lock:
            return [replace(r) for r in self._storage.values() if r.is_expired(now)]

    def __len__(self) -> int:
        return len(self._storage)


class InMemoryShortLinkRepository(ShortLinkRepository):
    """In-memory ShortLinkRepository with set-if-absent semantics."""

    def __init__(self):
        self._storage: Dict[str, ShortLink] = {}
        self._lock = threading.Lock()

    def save_if_absent(self, link: ShortLink) -> bool:
        with self._lock:
            if link.short_id in self._storage:
                return False
            self._storage[link.short_id] = link
            return True

    def get(self, short_id: str) -> Optional[ShortLink]:
        return self._storage.get(short_id)

    def delete(self, short_id: str) -> bool:
        with self._lock:
            return self._storage.pop(short_id, None) is not None

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [sid for sid, link in self._storage.items() if link.is_expired(now)]
            for sid in expired:
                del self._storage[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._storage)


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self._by_id: Dict[str, Account] = {}
        self._by_email: Dict[str, str] = {}

    def create(self, account: Account) -> bool:
        if account.email in self._by_email:
            return False
        self._by_email[account.email] = account.id
        self._by_id[account.id] = account
        return True

    def get(self, account_id: str) -> Optional[Account]:
        return self._by_id.get(account_id)

    def get_by_email(self, email: str) -> Optional[Account]:
        account_id = self._by_email.get(email)
        return self._by_id.get(account_id) if account_id else None


class InMemoryBlobStorage(IBlobStorage):
    """
    In-memory IBlobStorage.

    Set ``fail_saves``/``fail_signing`` to simulate upstream failures.
    """

    def __init__(self, clock=None):
        self.blobs: Dict[str, bytes] = {}
        self.content_types: Dict[str, Optional[str]] = {}
        self.signed: List[Dict[str, Any]] = []
        self.clock = clock or FakeClock()
        self.fail_saves = False
        self.fail_signing = False

    def save(self, storage_key: str, content: BinaryIO, content_type: Optional[str] = None) -> int:
        if not storage_key:
            raise ValueError("storage_key cannot be empty")
        if self.fail_saves:
            raise UpstreamStorageError(f"Simulated write failure for {storage_key}")
        data = content.read()
        self.blobs[storage_key] = data
        self.content_types[storage_key] = content_type
        return len(data)

    def get(self, storage_key: str) -> Optional[BinaryIO]:
        data = self.blobs.get(storage_key)
        return io.BytesIO(data) if data is not None else None

    def delete(self, storage_key: str) -> bool:
        self.blobs.pop(storage_key, None)
        return True

    def exists(self, storage_key: str) -> bool:
        return storage_key in self.blobs

    def generate_signed_url(
        self,
        storage_key: str,
        ttl_seconds: int,
        download_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RetrievalHandle:
        if self.fail_signing:
            raise UpstreamStorageError(f"Simulated signing failure for {storage_key}")
        self.signed.append({
            "storage_key": storage_key,
            "ttl_seconds": ttl_seconds,
            "download_name": download_name,
            "content_type": content_type,
        })
        return RetrievalHandle(
            url=f"https://blobs.example.com/{storage_key}?ttl={ttl_seconds}",
            expires_at=self.clock() + timedelta(seconds=ttl_seconds),
        )
