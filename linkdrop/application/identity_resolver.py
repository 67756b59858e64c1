"""
Identity Resolver

Works out who is making a request: a verified account, a guest, or nobody.
Identity only scopes listings and deletes; it never grants access to an
artifact.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from linkdrop.domain.errors import AuthenticationError

from .session_tokens import SESSION_COOKIE_NAME, SessionTokenService

logger = logging.getLogger(__name__)

GUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")
GUEST_HEADER = "X-Guest-Id"


@dataclass(frozen=True)
class Identity:
    """
    Resolved caller identity.

    Attributes:
        owner_id: 'user:<account id>' or 'guest:<guest id>'
        is_guest: True for guest identities
        account_id: Account id for verified users
        email: Account email for verified users
    """
    owner_id: str
    is_guest: bool
    account_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def for_account(cls, account_id: str, email: Optional[str] = None) -> 'Identity':
        return cls(owner_id=f"user:{account_id}", is_guest=False,
                   account_id=account_id, email=email)

    @classmethod
    def for_guest(cls, guest_id: str) -> 'Identity':
        return cls(owner_id=f"guest:{guest_id}", is_guest=True)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def is_valid_guest_id(guest_id: Optional[str]) -> bool:
    return bool(guest_id) and GUEST_ID_PATTERN.match(guest_id) is not None


class IdentityResolver:
    """
    Resolves request credentials to an Identity.

    Precedence: a verifiable session token (bearer header first, then
    cookie), then a well-formed guest id, then anonymous.
    """

    def __init__(self, session_tokens: SessionTokenService):
        self.session_tokens = session_tokens

    def resolve(
        self,
        authorization: Optional[str] = None,
        session_cookie: Optional[str] = None,
        guest_id: Optional[str] = None,
    ) -> Optional[Identity]:
        """
        Resolve an identity from raw request credentials.

        Args:
            authorization: Authorization header value
            session_cookie: Session cookie value
            guest_id: Guest id from header or form/query field

        Returns:
            Identity, or None when the caller is anonymous
        """
        for token in (bearer_token(authorization), session_cookie):
            if not token:
                continue
            try:
                claims = self.session_tokens.verify(token)
            except AuthenticationError as e:
                # A bad token falls through to guest resolution
                logger.debug(f"Ignoring unverifiable session token: {e}")
                continue
            return Identity.for_account(claims.account_id, claims.email)

        if guest_id is not None:
            guest_id = guest_id.strip()
            if is_valid_guest_id(guest_id):
                return Identity.for_guest(guest_id)
            logger.debug("Ignoring malformed guest id")

        return None

    def resolve_request(self, request) -> Optional[Identity]:
        """
        Resolve an identity from a Flask/Werkzeug request.

        The guest id is read from the X-Guest-Id header, then the
        'guestId' form field, then the 'guestId' query parameter.
        """
        guest_id = (
            request.headers.get(GUEST_HEADER)
            or request.form.get("guestId")
            or request.args.get("guestId")
        )
        return self.resolve(
            authorization=request.headers.get("Authorization"),
            session_cookie=request.cookies.get(SESSION_COOKIE_NAME),
            guest_id=guest_id,
        )
