"""
Artifacts Domain

Artifact metadata records, the access gate, and the download counter.
"""

from .access_gate import evaluate
from .entities import ArtifactRecord, is_expired, utc_now
from .passwords import hash_password, verify_password
from .repositories import ArtifactRepository
from .services import ArtifactStore
from .value_objects import AccessDecision, DenialReason, ExpiryPolicy

__all__ = [
    "AccessDecision",
    "ArtifactRecord",
    "ArtifactRepository",
    "ArtifactStore",
    "DenialReason",
    "ExpiryPolicy",
    "evaluate",
    "hash_password",
    "is_expired",
    "utc_now",
    "verify_password",
]
