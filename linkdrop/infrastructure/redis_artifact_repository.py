"""
Redis Artifact Repository

Redis-backed ArtifactRepository. Records are stored as JSON; the download
counter is updated by a Lua script so the quota check and the increment
are a single atomic step on the server, whichever instance calls it.

Key layout (before the repository prefix):
    artifact:<id>                  JSON record
    owner_artifacts:<owner_id>     sorted set of ids scored by created_at
    artifact_expiry                sorted set of ids scored by expires_at
    artifact_exhausted             set of ids whose quota is used up
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from redis.exceptions import RedisError

from linkdrop.domain.artifacts.entities import ArtifactRecord
from linkdrop.domain.artifacts.repositories import ArtifactRepository
from linkdrop.domain.errors import ArtifactNotFoundError, PersistenceError

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)

# KEYS[1] = artifact key, KEYS[2] = exhausted set; ARGV[1] = artifact id
# Returns the new count, -1 if the record is missing, -2 if quota is used up.
INCREMENT_DOWNLOAD_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return -1
end

local record = cjson.decode(data)
local count = tonumber(record['download_count']) or 0
local limit = record['download_limit']
local has_limit = limit ~= nil and limit ~= cjson.null

if has_limit and count >= tonumber(limit) then
    return -2
end

count = count + 1
record['download_count'] = count

local ttl = redis.call('PTTL', KEYS[1])
local encoded = cjson.encode(record)
if ttl > 0 then
    redis.call('SET', KEYS[1], encoded, 'PX', ttl)
else
    redis.call('SET', KEYS[1], encoded)
end

if has_limit and count >= tonumber(limit) then
    redis.call('SADD', KEYS[2], ARGV[1])
end

return count
"""


class RedisArtifactRepository(ArtifactRepository):
    """
    Redis-based implementation of ArtifactRepository.

    Records carry no Redis TTL: expiry is detected lazily by the access
    gate and physically enforced by the periodic sweep.
    """

    def __init__(self, redis_repository: RedisRepository):
        """
        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.record_prefix = "artifact"
        self.owner_prefix = "owner_artifacts"
        self.expiry_index = "artifact_expiry"
        self.exhausted_index = "artifact_exhausted"

    def _record_key(self, artifact_id: str) -> str:
        return f"{self.record_prefix}:{artifact_id}"

    def _owner_key(self, owner_id: str) -> str:
        return f"{self.owner_prefix}:{owner_id}"

    def save(self, record: ArtifactRecord) -> None:
        """
        Save the record and its index entries in one MULTI/EXEC.
        """
        make_key = self.redis_repo.make_key
        try:
            pipe = self.redis_repo.pipeline(transaction=True)
            pipe.set(make_key(self._record_key(record.id)), json.dumps(record.to_dict()))
            if record.owner_id is not None:
                pipe.zadd(
                    make_key(self._owner_key(record.owner_id)),
                    {record.id: record.created_at.timestamp()},
                )
            if record.expires_at is not None:
                pipe.zadd(
                    make_key(self.expiry_index),
                    {record.id: record.expires_at.timestamp()},
                )
            if record.is_quota_exhausted():
                pipe.sadd(make_key(self.exhausted_index), record.id)
            pipe.execute()
        except RedisError as e:
            logger.error(f"Error saving artifact {record.id}: {e}")
            raise PersistenceError(f"Failed to save artifact {record.id}", original_error=e) from e

    def get(self, artifact_id: str) -> Optional[ArtifactRecord]:
        """Retrieve an artifact record by id."""
        data = self.redis_repo.get_json(self._record_key(artifact_id))
        if data is None:
            return None
        try:
            return ArtifactRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error deserializing artifact {artifact_id}: {e}")
            raise PersistenceError(f"Corrupt artifact record {artifact_id}", original_error=e) from e

    def increment_download_count(self, artifact_id: str) -> Optional[int]:
        result = self.redis_repo.eval_script(
            INCREMENT_DOWNLOAD_SCRIPT,
            keys=[self._record_key(artifact_id), self.exhausted_index],
            args=[artifact_id],
        )
        result = int(result)
        if result == -1:
            raise ArtifactNotFoundError(f"Artifact not found: {artifact_id}")
        if result == -2:
            return None
        return result

    def list_by_owner(self, owner_id: str) -> List[ArtifactRecord]:
        """
        List an owner's records, newest first.

        Index entries whose record is gone are pruned on the way.
        """
        if not owner_id:
            return []
        owner_key = self.redis_repo.make_key(self._owner_key(owner_id))
        try:
            ids = self.redis_repo.redis.zrevrange(owner_key, 0, -1)
        except RedisError as e:
            logger.error(f"Error listing artifacts for {owner_id}: {e}")
            raise PersistenceError(f"Failed to list artifacts for {owner_id}", original_error=e) from e

        ids = [i.decode("utf-8") if isinstance(i, bytes) else i for i in ids]
        payloads = self.redis_repo.get_json_many([self._record_key(i) for i in ids])

        records = []
        stale = []
        for artifact_id, data in zip(ids, payloads):
            if data is None:
                stale.append(artifact_id)
                continue
            records.append(ArtifactRecord.from_dict(data))

        if stale:
            try:
                self.redis_repo.redis.zrem(owner_key, *stale)
            except RedisError as e:
                logger.warning(f"Could not prune stale owner index entries for {owner_id}: {e}")
        return records

    def delete(self, artifact_id: str) -> bool:
        """
        Delete the record and remove it from every index.
        """
        record = self.get(artifact_id)
        if record is None:
            return False

        make_key = self.redis_repo.make_key
        try:
            pipe = self.redis_repo.pipeline(transaction=True)
            pipe.delete(make_key(self._record_key(artifact_id)))
            if record.owner_id is not None:
                pipe.zrem(make_key(self._owner_key(record.owner_id)), artifact_id)
            pipe.zrem(make_key(self.expiry_index), artifact_id)
            pipe.srem(make_key(self.exhausted_index), artifact_id)
            results = pipe.execute()
        except RedisError as e:
            logger.error(f"Error deleting artifact {artifact_id}: {e}")
            raise PersistenceError(f"Failed to delete artifact {artifact_id}", original_error=e) from e
        return bool(results[0])

    def find_expired(self, now: datetime) -> List[ArtifactRecord]:
        """
        Find records expired by time (expiry index) or quota (exhausted set).
        """
        make_key = self.redis_repo.make_key
        try:
            timed_out = self.redis_repo.redis.zrangebyscore(
                make_key(self.expiry_index), "-inf", f"({now.timestamp()}"
            )
            exhausted = self.redis_repo.redis.smembers(make_key(self.exhausted_index))
        except RedisError as e:
            logger.error(f"Error scanning expiry indexes: {e}")
            raise PersistenceError("Failed to scan expiry indexes", original_error=e) from e

        ids = []
        for raw in list(timed_out) + list(exhausted):
            artifact_id = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            if artifact_id not in ids:
                ids.append(artifact_id)

        expired = []
        for artifact_id, data in zip(ids, self.redis_repo.get_json_many([self._record_key(i) for i in ids])):
            if data is None:
                continue
            record = ArtifactRecord.from_dict(data)
            if record.is_expired(now):
                expired.append(record)
        return expired
