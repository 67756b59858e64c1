"""
Redis Account Repository
"""

import logging
from typing import Optional

from linkdrop.domain.accounts.entities import Account
from linkdrop.domain.accounts.repositories import AccountRepository

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)


class RedisAccountRepository(AccountRepository):
    """
    Accounts stored as JSON under ``account:<id>``, with an
    ``account_email:<email>`` pointer claimed via SET NX so two concurrent
    registrations of the same email cannot both win.
    """

    def __init__(self, redis_repository: RedisRepository):
        self.redis_repo = redis_repository

    def create(self, account: Account) -> bool:
        email_key = f"account_email:{account.email}"
        if not self.redis_repo.set_json_if_absent(email_key, {"id": account.id}):
            return False
        self.redis_repo.set_json(f"account:{account.id}", account.to_dict())
        return True

    def get(self, account_id: str) -> Optional[Account]:
        data = self.redis_repo.get_json(f"account:{account_id}")
        return Account.from_dict(data) if data else None

    def get_by_email(self, email: str) -> Optional[Account]:
        pointer = self.redis_repo.get_json(f"account_email:{email}")
        if not pointer:
            return None
        return self.get(pointer["id"])
