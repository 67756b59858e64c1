"""
Link Registry Service

Creates and resolves short links. Resolution never looks at the target
artifact; the page it redirects to does its own expiry checks.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from ..artifacts.entities import utc_now
from ..errors import PersistenceError, ShortLinkNotFoundError
from .entities import DEFAULT_SHORT_ID_LENGTH, ShortLink, is_valid_short_id
from .repositories import ShortLinkRepository

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=7)
MAX_CREATE_ATTEMPTS = 5


class LinkRegistry:
    """Domain service for short link creation and lookup."""

    def __init__(
        self,
        short_link_repository: ShortLinkRepository,
        retention: timedelta = DEFAULT_RETENTION,
        short_id_length: int = DEFAULT_SHORT_ID_LENGTH,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            short_link_repository: Persistence for short links
            retention: How long a mapping stays resolvable
            short_id_length: Length of generated short ids
            clock: Returns the current time
        """
        self.short_link_repo = short_link_repository
        self.retention = retention
        self.short_id_length = short_id_length
        self.clock = clock

    def create_short_link(self, target_url: str) -> str:
        """
        Mint a new short id for a URL.

        Args:
            target_url: Long URL to redirect to

        Returns:
            The new short id

        Raises:
            ValueError: If target_url is empty
            PersistenceError: If no free short id was found
        """
        if not target_url or not target_url.strip():
            raise ValueError("target_url cannot be empty")

        for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
            link = ShortLink.create(
                target_url,
                ttl=self.retention,
                length=self.short_id_length,
                now=self.clock(),
            )
            if self.short_link_repo.save_if_absent(link):
                return link.short_id
            logger.warning(
                f"Short id collision on attempt {attempt}, regenerating"
            )

        raise PersistenceError(
            f"Could not allocate a unique short id after {MAX_CREATE_ATTEMPTS} attempts"
        )

    def resolve_short_link(self, short_id: str) -> str:
        """
        Look up the target URL of a short id.

        Raises:
            ShortLinkNotFoundError: If unknown or past retention
        """
        if not is_valid_short_id(short_id):
            raise ShortLinkNotFoundError(f"Invalid short id: {short_id!r}")

        link = self.short_link_repo.get(short_id)
        if link is None or link.is_expired(self.clock()):
            raise ShortLinkNotFoundError(f"Short link not found: {short_id}")
        return link.target_url

    def purge_expired(self) -> int:
        return self.short_link_repo.purge_expired(self.clock())
