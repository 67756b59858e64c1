"""
Test fixtures: in-memory repositories, blob storage and a fake clock.
"""

from .mock_repositories import (
    FakeClock,
    InMemoryAccountRepository,
    InMemoryArtifactRepository,
    InMemoryBlobStorage,
    InMemoryShortLinkRepository,
)

__all__ = [
    "FakeClock",
    "InMemoryAccountRepository",
    "InMemoryArtifactRepository",
    "InMemoryBlobStorage",
    "InMemoryShortLinkRepository",
]
