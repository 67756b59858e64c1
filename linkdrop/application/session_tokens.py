"""
Session Tokens

Signed session tokens for registered accounts (PyJWT, HS256).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from linkdrop.domain.accounts import Account
from linkdrop.domain.artifacts.entities import utc_now
from linkdrop.domain.errors import AuthenticationError

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "linkdrop_session"
TOKEN_TYPE = "session"
ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionClaims:
    """Verified claims of a session token."""
    account_id: str
    email: str
    expires_at: datetime


class SessionTokenService:
    """
    Issues and verifies session tokens.

    Tokens are stateless; logging out clears the client cookie and the
    token simply lapses at its expiry.
    """

    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret_key:
            raise ValueError("secret_key is required for session tokens")
        self.secret_key = secret_key
        self.ttl = ttl
        self.clock = clock

    def issue(self, account: Account) -> str:
        """
        Create a signed session token for an account.

        Args:
            account: Authenticated account

        Returns:
            Encoded JWT
        """
        now = self.clock()
        payload = {
            "sub": account.id,
            "email": account.email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self.secret_key, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> SessionClaims:
        """
        Verify and decode a session token.

        Raises:
            AuthenticationError: If the token is missing, malformed, forged
                or expired
        """
        if not token:
            raise AuthenticationError("Missing session token")
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp", "type"], "verify_exp": False},
            )
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid session token: {e}", e) from e

        if claims.get("type") != TOKEN_TYPE:
            raise AuthenticationError("Token is not a session token")

        # Expiry is checked against the injectable clock, not wall time
        expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
        if self.clock() >= expires_at:
            raise AuthenticationError("Session token expired")

        return SessionClaims(
            account_id=str(claims["sub"]),
            email=str(claims.get("email", "")),
            expires_at=expires_at,
        )
