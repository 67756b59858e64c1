"""
Artifact Value Objects

Immutable value objects for access decisions and validated upload options.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import (
    ArtifactExpiredError,
    ArtifactNotFoundError,
    DomainError,
    IncorrectPasswordError,
    ValidationError,
)

# Ten years
MAX_EXPIRES_IN_HOURS = 24 * 365 * 10


class DenialReason(Enum):
    """Why the access gate refused a request."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INCORRECT_PASSWORD = "incorrect_password"

    def to_error(self, artifact_id: Optional[str] = None) -> DomainError:
        """Build the matching domain exception."""
        if self is DenialReason.NOT_FOUND:
            return ArtifactNotFoundError(f"Artifact not found: {artifact_id}")
        if self is DenialReason.EXPIRED:
            return ArtifactExpiredError(f"Artifact expired: {artifact_id}")
        return IncorrectPasswordError(f"Incorrect password for artifact: {artifact_id}")


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of the access gate: permit, or a denial with a reason."""

    permitted: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def permit(cls) -> 'AccessDecision':
        return cls(permitted=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> 'AccessDecision':
        return cls(permitted=False, reason=reason)

    @property
    def denied(self) -> bool:
        return not self.permitted

    def raise_if_denied(self, artifact_id: Optional[str] = None) -> None:
        if self.reason is not None:
            raise self.reason.to_error(artifact_id)


@dataclass(frozen=True)
class ExpiryPolicy:
    """
    Validated expiry options for a new upload.

    Attributes:
        expires_in_hours: Lifetime in hours, or None for no time limit
        download_limit: Maximum downloads, or None for unlimited
    """

    expires_in_hours: Optional[float] = None
    download_limit: Optional[int] = None

    def __post_init__(self):
        if self.expires_in_hours is not None and not (
            math.isfinite(self.expires_in_hours)
            and 0 < self.expires_in_hours <= MAX_EXPIRES_IN_HOURS
        ):
            raise ValidationError(
                "expiresInHours must be a positive number of at most "
                f"{MAX_EXPIRES_IN_HOURS} hours",
                field="expiresInHours",
            )
        if self.download_limit is not None and self.download_limit < 0:
            raise ValidationError(
                "downloadLimit must be a non-negative integer", field="downloadLimit"
            )

    @classmethod
    def from_raw(cls, expires_in_hours=None, download_limit=None) -> 'ExpiryPolicy':
        """
        Build a policy from untyped request values.

        Empty strings and None mean "not set".
        """
        return cls(
            expires_in_hours=_parse_optional_number(expires_in_hours, "expiresInHours", float),
            download_limit=_parse_optional_number(download_limit, "downloadLimit", int),
        )


def _parse_optional_number(value, field: str, kind):
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        if kind is int:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(str(value), 10) if isinstance(value, str) else int(value)
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be a number", field=field) from e
