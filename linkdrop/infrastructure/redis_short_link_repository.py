"""
Redis Short Link Repository

Short links are stored with a Redis TTL equal to the retention window, so
Redis expires them on its own. Creation uses SET NX to detect collisions.
"""

import logging
from datetime import datetime
from typing import Optional

from linkdrop.domain.link_registry.entities import ShortLink
from linkdrop.domain.link_registry.repositories import ShortLinkRepository

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)


class RedisShortLinkRepository(ShortLinkRepository):
    """Redis-based implementation of ShortLinkRepository."""

    def __init__(self, redis_repository: RedisRepository):
        self.redis_repo = redis_repository
        self.link_prefix = "short_link"

    def _key(self, short_id: str) -> str:
        return f"{self.link_prefix}:{short_id}"

    def save_if_absent(self, link: ShortLink) -> bool:
        ttl = link.get_remaining_seconds(link.created_at)
        if ttl <= 0:
            return False
        return self.redis_repo.set_json_if_absent(self._key(link.short_id), link.to_dict(), ttl=ttl)

    def get(self, short_id: str) -> Optional[ShortLink]:
        data = self.redis_repo.get_json(self._key(short_id))
        if data is None:
            return None
        try:
            return ShortLink.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error deserializing short link {short_id[:4]}...: {e}")
            return None

    def delete(self, short_id: str) -> bool:
        return self.redis_repo.delete(self._key(short_id)) > 0

    def purge_expired(self, now: datetime) -> int:
        """
        Remove links past retention that Redis has not evicted yet.

        Redis TTL removes almost everything; this catches keys written
        without a TTL or with clock skew between instances.
        """
        count = 0
        for key in self.redis_repo.scan_keys(f"{self.link_prefix}:*"):
            data = self.redis_repo.get_json(key)
            if data is None:
                continue
            try:
                link = ShortLink.from_dict(data)
            except (KeyError, TypeError, ValueError):
                self.redis_repo.delete(key)
                count += 1
                continue
            if link.is_expired(now):
                self.redis_repo.delete(key)
                count += 1
        return count
