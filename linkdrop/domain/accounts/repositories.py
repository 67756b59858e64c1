"""
Account Repositories
"""

from abc import ABC, abstractmethod
from typing import Optional

from .entities import Account


class AccountRepository(ABC):
    """Abstract repository interface for account persistence."""

    @abstractmethod
    def create(self, account: Account) -> bool:
        """
        Store a new account if its email is not registered yet.

        Returns:
            True if created, False if the email is taken
        """
        pass

    @abstractmethod
    def get(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Account]:
        pass
