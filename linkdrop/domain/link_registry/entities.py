"""
Link Registry Entities

Short link mapping with a fixed retention window.
"""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..artifacts.entities import _parse_datetime, utc_now

SHORT_ID_ALPHABET = string.ascii_letters + string.digits + "-_"
DEFAULT_SHORT_ID_LENGTH = 8
MIN_SHORT_ID_LENGTH = 7


def generate_short_id(length: int = DEFAULT_SHORT_ID_LENGTH) -> str:
    """
    Generate an unguessable short id from the URL-safe alphabet.

    Args:
        length: Number of characters (at least 7)

    Returns:
        Random short id
    """
    if length < MIN_SHORT_ID_LENGTH:
        raise ValueError(f"short id length must be at least {MIN_SHORT_ID_LENGTH}")
    return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(length))


def is_valid_short_id(value: str) -> bool:
    return bool(value) and len(value) <= 64 and all(c in SHORT_ID_ALPHABET for c in value)


@dataclass(frozen=True)
class ShortLink:
    """
    Immutable mapping from a short id to a long URL.

    Attributes:
        short_id: Public token used in ``/s/<short_id>``
        target_url: Long-form URL the short id redirects to
        created_at: Creation time
        expires_at: End of the retention window
    """
    short_id: str
    target_url: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(
        cls,
        target_url: str,
        ttl: timedelta,
        short_id: Optional[str] = None,
        length: int = DEFAULT_SHORT_ID_LENGTH,
        now: Optional[datetime] = None,
    ) -> 'ShortLink':
        now = now or utc_now()
        return cls(
            short_id=short_id or generate_short_id(length),
            target_url=target_url,
            created_at=now,
            expires_at=now + ttl,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def get_remaining_seconds(self, now: Optional[datetime] = None) -> int:
        remaining = self.expires_at - (now or utc_now())
        return max(0, int(remaining.total_seconds()))

    def to_dict(self) -> dict:
        return {
            "short_id": self.short_id,
            "target_url": self.target_url,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ShortLink':
        return cls(
            short_id=data["short_id"],
            target_url=data["target_url"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data["expires_at"]),
        )
