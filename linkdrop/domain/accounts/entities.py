"""
Account Entities
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..artifacts.entities import _parse_datetime, utc_now
from ..artifacts.passwords import hash_password, verify_password
from ..errors import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("A valid email address is required", field="email")
    return email


@dataclass
class Account:
    """A registered user. Owner ids for accounts are ``user:<id>``."""
    id: str
    email: str
    password_hash: str
    created_at: datetime

    @classmethod
    def create(cls, email: str, password: str, now: Optional[datetime] = None) -> 'Account':
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        return cls(
            id=uuid.uuid4().hex,
            email=normalize_email(email),
            password_hash=hash_password(password),
            created_at=now or utc_now(),
        )

    @property
    def owner_id(self) -> str:
        return f"user:{self.id}"

    def check_password(self, password: Optional[str]) -> bool:
        return verify_password(password, self.password_hash)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Account':
        return cls(
            id=data["id"],
            email=data["email"],
            password_hash=data["password_hash"],
            created_at=_parse_datetime(data["created_at"]),
        )
