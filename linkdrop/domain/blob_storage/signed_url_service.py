"""
Signed URL Service

Generates and validates HMAC-signed, time-limited URLs for blobs served
by this application (the local storage backend).
"""

import hashlib
import hmac
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote, urlencode

from ..artifacts.entities import utc_now
from .blob_storage import RetrievalHandle

DEFAULT_BLOB_PATH = "/api/blobs"


class SignedUrlService:
    """
    Service for generating and validating signed blob URLs.

    The signature covers the storage key, the expiry timestamp and the
    download name, so none of them can be altered by the client.
    """

    def __init__(
        self, secret_key: Optional[str] = None, base_url: Optional[str] = None
    ):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (falls back to the
                SECRET_KEY env var, then to a random per-process key)
            base_url: Absolute or relative prefix of the blob endpoint.
                Defaults to BACKEND_URL + '/api/blobs', or '/api/blobs'.
        """
        self.secret_key = (
            secret_key or os.getenv("SECRET_KEY") or self._generate_secret_key()
        )
        if base_url:
            self.base_url = base_url.rstrip("/")
        else:
            backend = os.getenv("BACKEND_URL")
            if backend:
                self.base_url = backend.rstrip("/") + DEFAULT_BLOB_PATH
            else:
                self.base_url = DEFAULT_BLOB_PATH

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(
        self,
        storage_key: str,
        ttl_seconds: int = 300,
        download_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RetrievalHandle:
        """
        Generate a signed URL for a blob.

        Args:
            storage_key: Blob key
            ttl_seconds: Time to live in seconds
            download_name: Optional attachment filename
            now: Signing time

        Returns:
            RetrievalHandle with URL and expiry
        """
        now = now or utc_now()
        expires_at = now + timedelta(seconds=ttl_seconds)
        expires = int(expires_at.timestamp())

        signature = self._generate_signature(storage_key, expires, download_name)
        params = {"expires": expires, "signature": signature}
        if download_name:
            params["name"] = download_name

        url = f"{self.base_url}/{quote(storage_key)}?{urlencode(params)}"
        return RetrievalHandle(
            url=url, expires_at=datetime.fromtimestamp(expires, tz=timezone.utc)
        )

    def _generate_signature(
        self, storage_key: str, expires: int, download_name: Optional[str]
    ) -> str:
        """
        Generate HMAC-SHA256 signature over key, expiry and download name.
        """
        message = f"{storage_key}:{expires}:{download_name or ''}"
        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate(
        self,
        storage_key: str,
        expires: Optional[str],
        signature: Optional[str],
        download_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Validate a signed blob request.

        Args:
            storage_key: Blob key from the URL path
            expires: 'expires' query parameter (unix seconds)
            signature: 'signature' query parameter
            download_name: 'name' query parameter
            now: Validation time

        Returns:
            True if the signature matches and has not expired
        """
        if not storage_key or not expires or not signature:
            return False
        try:
            expires_int = int(expires)
        except (TypeError, ValueError):
            return False

        expected = self._generate_signature(storage_key, expires_int, download_name)
        # Use constant-time comparison to prevent timing attacks
        if not hmac.compare_digest(signature, expected):
            return False

        now = now or utc_now()
        return now.timestamp() < expires_int
