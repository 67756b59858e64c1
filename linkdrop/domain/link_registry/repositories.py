"""
Short Link Repositories

Repository interface for short link persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .entities import ShortLink


class ShortLinkRepository(ABC):
    """Abstract repository interface for short link persistence."""

    @abstractmethod
    def save_if_absent(self, link: ShortLink) -> bool:
        """
        Store a short link only if its short id is unused.

        Must be a single atomic "set if not exists"; an existing mapping is
        never overwritten.

        Args:
            link: ShortLink to store

        Returns:
            True if stored, False if the short id is already taken

        Raises:
            PersistenceError: If the storage layer fails
        """
        pass

    @abstractmethod
    def get(self, short_id: str) -> Optional[ShortLink]:
        """
        Retrieve a stored short link.

        Retention is checked by the caller against its own clock; a link
        past retention may still be returned until it is purged.

        Returns:
            ShortLink if stored, None otherwise
        """
        pass

    @abstractmethod
    def delete(self, short_id: str) -> bool:
        pass

    @abstractmethod
    def purge_expired(self, now: datetime) -> int:
        """
        Remove mappings past their retention window.

        Returns:
            Number of mappings removed
        """
        pass
