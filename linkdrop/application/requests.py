"""
Request Inputs

Explicit input structures per endpoint. The API layer builds these from
form/JSON data; services only ever see validated values.
"""

from dataclasses import dataclass
from typing import BinaryIO, Optional

from linkdrop.domain.artifacts.value_objects import ExpiryPolicy
from linkdrop.domain.errors import ValidationError

MAX_FILENAME_LENGTH = 255
MAX_PASSWORD_LENGTH = 1024


def _optional_password(value) -> Optional[str]:
    """Empty or missing passwords mean "no password"."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("password must be a string", field="password")
    if value == "":
        return None
    if len(value) > MAX_PASSWORD_LENGTH:
        raise ValidationError("password is too long", field="password")
    return value


@dataclass(frozen=True)
class UploadRequest:
    """
    Validated input for POST /upload.

    Attributes:
        stream: File content
        filename: Original client filename
        content_type: MIME type reported by the client
        password: Optional password protecting downloads
        policy: Expiry options
    """
    stream: BinaryIO
    filename: str
    content_type: Optional[str] = None
    password: Optional[str] = None
    policy: ExpiryPolicy = ExpiryPolicy()

    @classmethod
    def build(
        cls,
        stream: Optional[BinaryIO],
        filename: Optional[str],
        content_type: Optional[str] = None,
        password=None,
        expires_in_hours=None,
        download_limit=None,
    ) -> 'UploadRequest':
        """
        Validate raw multipart values.

        Raises:
            ValidationError: On a missing file or malformed option
        """
        if stream is None or not filename or not filename.strip():
            raise ValidationError("A file is required", field="file")
        filename = filename.strip()
        if len(filename) > MAX_FILENAME_LENGTH:
            raise ValidationError("Filename is too long", field="file")

        return cls(
            stream=stream,
            filename=filename,
            content_type=content_type or None,
            password=_optional_password(password),
            policy=ExpiryPolicy.from_raw(expires_in_hours, download_limit),
        )


@dataclass(frozen=True)
class DownloadRequest:
    """Validated input for POST /files/<id>/download."""
    password: Optional[str] = None

    @classmethod
    def from_json(cls, payload) -> 'DownloadRequest':
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        return cls(password=_optional_password(payload.get("password")))
