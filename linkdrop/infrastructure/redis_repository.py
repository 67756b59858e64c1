"""
Redis Repository Base Class

Provides JSON storage, atomic script execution and key helpers shared by
the Redis-backed repositories.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from linkdrop.domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class RedisRepository:
    """
    Base Redis repository with atomic operations.

    Redis failures are logged and re-raised as PersistenceError so callers
    never confuse "store unavailable" with "record missing".
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def _fail(self, action: str, key: str, error: Exception) -> PersistenceError:
        logger.error(f"Redis error while {action} {key}: {error}")
        return PersistenceError(f"Redis error while {action} {key}", original_error=error)

    def set_json(self, key: str, data: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Set JSON data with optional TTL.

        Args:
            key: Redis key (unprefixed)
            data: Dictionary to store as JSON
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        try:
            redis_key = self.make_key(key)
            json_data = json.dumps(data)
            if ttl:
                return bool(self.redis.set(redis_key, json_data, ex=ttl))
            return bool(self.redis.set(redis_key, json_data))
        except RedisError as e:
            raise self._fail("setting", key, e) from e

    def set_json_if_absent(self, key: str, data: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Atomically set JSON data only if the key does not exist (SET NX).

        Returns:
            True if written, False if the key already existed
        """
        try:
            redis_key = self.make_key(key)
            result = self.redis.set(redis_key, json.dumps(data), ex=ttl or None, nx=True)
            return bool(result)
        except RedisError as e:
            raise self._fail("setting", key, e) from e

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found, None if missing or not valid JSON
        """
        try:
            data = self.redis.get(self.make_key(key))
        except RedisError as e:
            raise self._fail("reading", key, e) from e

        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON stored at {key}: {e}")
            return None

    def get_json_many(self, keys: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        """Fetch several JSON values with one MGET, preserving order."""
        if not keys:
            return []
        try:
            values = self.redis.mget([self.make_key(k) for k in keys])
        except RedisError as e:
            raise self._fail("reading", ",".join(keys), e) from e

        results = []
        for key, value in zip(keys, values):
            if value is None:
                results.append(None)
                continue
            try:
                results.append(json.loads(value))
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt JSON stored at {key}: {e}")
                results.append(None)
        return results

    def delete(self, *keys: str) -> int:
        """
        Delete keys from Redis.

        Returns:
            Number of keys removed
        """
        if not keys:
            return 0
        try:
            return self.redis.delete(*[self.make_key(k) for k in keys])
        except RedisError as e:
            raise self._fail("deleting", ",".join(keys), e) from e

    def exists(self, key: str) -> bool:
        try:
            return self.redis.exists(self.make_key(key)) > 0
        except RedisError as e:
            raise self._fail("checking", key, e) from e

    def scan_keys(self, pattern: str) -> List[str]:
        """
        Get all keys matching a pattern using SCAN.

        Returns:
            List of matching keys (without prefix)
        """
        try:
            keys = self.redis.scan_iter(match=self.make_key(pattern), count=500)
            prefix_len = len(self.key_prefix) + 1 if self.key_prefix else 0
            result = []
            for key in keys:
                if isinstance(key, bytes):
                    key = key.decode("utf-8")
                result.append(key[prefix_len:])
            return result
        except RedisError as e:
            raise self._fail("scanning", pattern, e) from e

    def eval_script(self, script: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """
        Run a Lua script atomically on the server.

        Args:
            script: Lua source
            keys: Unprefixed keys (passed as KEYS)
            args: Script arguments (passed as ARGV)
        """
        try:
            redis_keys = [self.make_key(k) for k in keys]
            return self.redis.eval(script, len(redis_keys), *redis_keys, *args)
        except RedisError as e:
            raise self._fail("running script on", ",".join(keys), e) from e

    def pipeline(self, transaction: bool = True):
        """Create a MULTI/EXEC pipeline on the underlying client."""
        return self.redis.pipeline(transaction=transaction)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 decode_responses: bool = True):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisConnectionError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
