"""
Shared pytest fixtures and configuration for the LinkDrop test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory repositories, blob storage and a controllable clock
- Wired domain/application services
- A Flask app and test client built on the in-memory adapters
"""

from datetime import timedelta

import pytest
from hypothesis import HealthCheck, Phase, settings

from app_factory import AppConfig, Repositories, create_app
from linkdrop.application import (
    ArtifactService,
    AuthService,
    DownloadGrantService,
    EventPublisher,
    IdentityResolver,
    SessionTokenService,
    UploadService,
)
from linkdrop.domain.artifacts import ArtifactStore
from linkdrop.domain.blob_storage import SignedUrlService
from linkdrop.domain.events import (
    AccessDeniedEvent,
    ArtifactDeletedEvent,
    ArtifactUploadedEvent,
    DownloadGrantedEvent,
    ShortLinkCreatedEvent,
)
from linkdrop.domain.link_registry import LinkRegistry
from tests.fixtures import (
    FakeClock,
    InMemoryAccountRepository,
    InMemoryArtifactRepository,
    InMemoryBlobStorage,
    InMemoryShortLinkRepository,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")

TEST_SECRET = "test-secret-key-for-linkdrop-0123456789"
FRONTEND_URL = "https://app.linkdrop.test"
BACKEND_URL = "https://api.linkdrop.test"

ALL_EVENTS = [
    ArtifactUploadedEvent,
    ShortLinkCreatedEvent,
    DownloadGrantedEvent,
    AccessDeniedEvent,
    ArtifactDeletedEvent,
]


# =============================================================================
# Adapters
# =============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def artifact_repository():
    return InMemoryArtifactRepository()


@pytest.fixture
def short_link_repository():
    return InMemoryShortLinkRepository()


@pytest.fixture
def account_repository():
    return InMemoryAccountRepository()


@pytest.fixture
def blob_storage(clock):
    return InMemoryBlobStorage(clock)


@pytest.fixture
def published_events():
    """List that collects every event published by `event_publisher`."""
    return []


@pytest.fixture
def event_publisher(published_events):
    publisher = EventPublisher()
    publisher.subscribe_all(ALL_EVENTS, published_events.append)
    return publisher


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def artifact_store(artifact_repository, clock):
    return ArtifactStore(artifact_repository, clock=clock)


@pytest.fixture
def link_registry(short_link_repository, clock):
    return LinkRegistry(short_link_repository, retention=timedelta(days=7), clock=clock)


@pytest.fixture
def grant_service(artifact_store, blob_storage, event_publisher):
    return DownloadGrantService(artifact_store, blob_storage, event_publisher)


@pytest.fixture
def artifact_service(artifact_store, grant_service, blob_storage, event_publisher):
    return ArtifactService(artifact_store, grant_service, blob_storage, event_publisher)


@pytest.fixture
def upload_service(artifact_store, link_registry, blob_storage, event_publisher):
    return UploadService(
        artifact_store,
        link_registry,
        blob_storage,
        event_publisher,
        frontend_url=FRONTEND_URL,
        backend_url=BACKEND_URL,
        max_upload_bytes=1024,
    )


@pytest.fixture
def session_tokens(clock):
    return SessionTokenService(TEST_SECRET, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def identity_resolver(session_tokens):
    return IdentityResolver(session_tokens)


@pytest.fixture
def auth_service(account_repository, session_tokens, clock):
    return AuthService(account_repository, session_tokens, clock=clock)


# =============================================================================
# Flask application
# =============================================================================

@pytest.fixture
def app_config(tmp_path):
    config = AppConfig()
    config.secret_key = TEST_SECRET
    config.frontend_url = FRONTEND_URL
    config.backend_url = BACKEND_URL
    config.cors_origins = FRONTEND_URL
    config.session_cookie_secure = False
    config.short_link_ttl_days = 7
    config.short_id_length = 8
    config.log_level = "INFO"
    config.storage.upload_dir = str(tmp_path / "uploads")
    config.storage.max_upload_bytes = 1024
    config.storage.download_url_ttl_seconds = 300
    return config


@pytest.fixture
def repositories(artifact_repository, short_link_repository, account_repository, blob_storage):
    return Repositories(
        artifacts=artifact_repository,
        short_links=short_link_repository,
        accounts=account_repository,
        blob_storage=blob_storage,
        signed_urls=SignedUrlService(TEST_SECRET, base_url=f"{BACKEND_URL}/api/blobs"),
    )


@pytest.fixture
def app(app_config, repositories, clock):
    flask_app = create_app(app_config, repositories=repositories, clock=clock)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
