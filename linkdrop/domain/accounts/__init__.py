"""
Accounts Domain
"""

from .entities import Account, normalize_email
from .repositories import AccountRepository

__all__ = ["Account", "AccountRepository", "normalize_email"]
