"""
Auth Service

Account registration and login.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from linkdrop.domain.accounts import Account, AccountRepository, normalize_email
from linkdrop.domain.artifacts.entities import utc_now
from linkdrop.domain.errors import (
    AccountExistsError,
    AuthenticationError,
    ValidationError,
)

from .session_tokens import SessionTokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """A logged-in account and its session token."""
    account: Account
    token: str

    def to_dict(self) -> dict:
        return {
            "id": self.account.id,
            "email": self.account.email,
            "token": self.token,
        }


class AuthService:
    """Registers accounts and exchanges credentials for session tokens."""

    def __init__(
        self,
        account_repository: AccountRepository,
        session_tokens: SessionTokenService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.account_repo = account_repository
        self.session_tokens = session_tokens
        self.clock = clock

    def register(self, email, password) -> AuthResult:
        """
        Create an account and log it in.

        Raises:
            ValidationError: On a malformed email or short password
            AccountExistsError: If the email is already registered
        """
        if not isinstance(password, str):
            raise ValidationError("password is required", field="password")
        account = Account.create(email, password, now=self.clock())
        if not self.account_repo.create(account):
            raise AccountExistsError(f"Account already exists: {account.email}")
        logger.info(f"Registered account {account.id}")
        return AuthResult(account=account, token=self.session_tokens.issue(account))

    def login(self, email, password) -> AuthResult:
        """
        Verify credentials and issue a session token.

        Raises:
            AuthenticationError: If the email is unknown or the password wrong
        """
        try:
            normalized = normalize_email(email)
        except ValidationError as e:
            raise AuthenticationError("Invalid credentials", e) from e

        account = self.account_repo.get_by_email(normalized)
        if account is None or not isinstance(password, str) or not account.check_password(password):
            raise AuthenticationError("Invalid credentials")
        return AuthResult(account=account, token=self.session_tokens.issue(account))
