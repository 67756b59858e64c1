"""
Link Registry Domain

Short id to long URL mappings with their own retention window.
"""

from .entities import ShortLink, generate_short_id, is_valid_short_id
from .repositories import ShortLinkRepository
from .services import LinkRegistry

__all__ = [
    "LinkRegistry",
    "ShortLink",
    "ShortLinkRepository",
    "generate_short_id",
    "is_valid_short_id",
]
