"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from linkdrop.application import (
    ArtifactService,
    AuthService,
    DependencyContainer,
    DownloadGrantService,
    EventPublisher,
    IdentityResolver,
    SessionTokenService,
    UploadService,
)
from linkdrop.config.celery_config import make_celery
from linkdrop.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from linkdrop.config.storage_config import StorageConfig, describe_backend
from linkdrop.domain.accounts import AccountRepository
from linkdrop.domain.artifacts import ArtifactRepository, ArtifactStore, utc_now
from linkdrop.domain.blob_storage import IBlobStorage, SignedUrlService
from linkdrop.domain.events import (
    AccessDeniedEvent,
    ArtifactDeletedEvent,
    ArtifactUploadedEvent,
    DownloadGrantedEvent,
    ShortLinkCreatedEvent,
)
from linkdrop.domain.link_registry import LinkRegistry, ShortLinkRepository
from linkdrop.infrastructure.event_handlers import LoggingEventHandler
from linkdrop.tasks import register_sweep_task

logger = logging.getLogger(__name__)

# Multipart framing on top of the file itself
MULTIPART_OVERHEAD_BYTES = 1024 * 1024


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
        self.backend_url = os.getenv("BACKEND_URL", "http://localhost:8000").rstrip("/")
        self.cors_origins = os.getenv("CORS_ORIGINS", self.frontend_url)

        # Falls back to a per-process key, which invalidates sessions and
        # signed URLs on restart
        self.secret_key = os.getenv("SECRET_KEY") or secrets.token_hex(32)
        self.session_ttl_hours = float(os.getenv("SESSION_TTL_HOURS", 24))
        self.session_cookie_secure = os.getenv(
            "SESSION_COOKIE_SECURE", "true" if self.is_production else "false"
        ).lower() == "true"

        self.short_link_ttl_days = float(os.getenv("SHORT_LINK_TTL_DAYS", 7))
        self.short_id_length = int(os.getenv("SHORT_ID_LENGTH", 8))

        self.storage = StorageConfig()


@dataclass
class Repositories:
    """Persistence adapters the services are built on."""
    artifacts: ArtifactRepository
    short_links: ShortLinkRepository
    accounts: AccountRepository
    blob_storage: IBlobStorage
    signed_urls: SignedUrlService


def configure_logging(level: str) -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    root.setLevel(level)


def create_app(
    config: Optional[AppConfig] = None,
    repositories: Optional[Repositories] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        repositories: Persistence adapters to use instead of Redis and the
            configured blob storage (tests pass in-memory ones)
        clock: Time source shared by all services

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    configure_logging(config.log_level)

    # Create Flask app
    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["MAX_CONTENT_LENGTH"] = config.storage.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    app.config["SESSION_TTL_HOURS"] = config.session_ttl_hours
    app.config["SESSION_COOKIE_SECURE"] = config.session_cookie_secure

    # Configure CORS
    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": [o.strip() for o in config.cors_origins.split(",") if o.strip()],
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", "X-Guest-Id"],
                "supports_credentials": True,
                "max_age": 3600,
            }
        },
    )

    # Initialize infrastructure
    if repositories is None:
        repositories = _initialize_infrastructure(config)

    app.celery = make_celery(app)
    register_sweep_task(app.celery)

    # Initialize services
    app.container = build_container(config, repositories, clock)

    # Register blueprints
    _register_blueprints(app)

    # Register health check endpoint
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(config: AppConfig) -> Repositories:
    """
    Connect Redis and the blob storage backend.

    Raises:
        RuntimeError: If the storage backend cannot be initialized
    """
    from linkdrop.infrastructure.redis_account_repository import RedisAccountRepository
    from linkdrop.infrastructure.redis_artifact_repository import RedisArtifactRepository
    from linkdrop.infrastructure.redis_short_link_repository import RedisShortLinkRepository
    from linkdrop.infrastructure.storage_factory import StorageFactory

    init_redis()
    redis_repo = get_redis_repository()
    logger.info("Redis initialized")

    signed_urls = SignedUrlService(
        secret_key=config.secret_key, base_url=f"{config.backend_url}/api/blobs"
    )
    blob_storage = StorageFactory.create_storage(config.storage, signed_urls)
    logger.info(f"Blob storage: {describe_backend(config.storage)}")

    return Repositories(
        artifacts=RedisArtifactRepository(redis_repo),
        short_links=RedisShortLinkRepository(redis_repo),
        accounts=RedisAccountRepository(redis_repo),
        blob_storage=blob_storage,
        signed_urls=signed_urls,
    )


def build_container(
    config: AppConfig,
    repositories: Repositories,
    clock: Callable[[], datetime] = utc_now,
) -> DependencyContainer:
    """
    Build domain and application services and register them.

    All services are registered as singletons and resolved via
    container.resolve() in API routes and tasks.
    """
    container = DependencyContainer()

    # Events
    event_publisher = EventPublisher()
    event_handler = LoggingEventHandler(logging.getLogger("linkdrop.events"))
    event_publisher.subscribe_all(
        [
            ArtifactUploadedEvent,
            ShortLinkCreatedEvent,
            DownloadGrantedEvent,
            AccessDeniedEvent,
            ArtifactDeletedEvent,
        ],
        event_handler.handle,
    )
    container.register_singleton(EventPublisher, event_publisher)

    # Infrastructure adapters
    container.register_singleton(ArtifactRepository, repositories.artifacts)
    container.register_singleton(ShortLinkRepository, repositories.short_links)
    container.register_singleton(AccountRepository, repositories.accounts)
    container.register_singleton(IBlobStorage, repositories.blob_storage)
    container.register_singleton(SignedUrlService, repositories.signed_urls)

    # Domain services
    artifact_store = ArtifactStore(repositories.artifacts, clock=clock)
    link_registry = LinkRegistry(
        repositories.short_links,
        retention=timedelta(days=config.short_link_ttl_days),
        short_id_length=config.short_id_length,
        clock=clock,
    )
    container.register_singleton(ArtifactStore, artifact_store)
    container.register_singleton(LinkRegistry, link_registry)

    # Application services
    session_tokens = SessionTokenService(
        config.secret_key, ttl=timedelta(hours=config.session_ttl_hours), clock=clock
    )
    grant_service = DownloadGrantService(
        artifact_store,
        repositories.blob_storage,
        event_publisher,
        handle_ttl_seconds=config.storage.download_url_ttl_seconds,
    )
    artifact_service = ArtifactService(
        artifact_store, grant_service, repositories.blob_storage, event_publisher
    )
    upload_service = UploadService(
        artifact_store,
        link_registry,
        repositories.blob_storage,
        event_publisher,
        frontend_url=config.frontend_url,
        backend_url=config.backend_url,
        max_upload_bytes=config.storage.max_upload_bytes,
    )

    container.register_singleton(SessionTokenService, session_tokens)
    container.register_singleton(IdentityResolver, IdentityResolver(session_tokens))
    container.register_singleton(
        AuthService, AuthService(repositories.accounts, session_tokens, clock=clock)
    )
    container.register_singleton(DownloadGrantService, grant_service)
    container.register_singleton(ArtifactService, artifact_service)
    container.register_singleton(UploadService, upload_service)

    logger.info(f"Application services initialized ({len(container)} registrations)")
    return container


def _register_blueprints(app: Flask) -> None:
    from linkdrop.api import create_api_blueprint
    from linkdrop.api.redirects import redirects_bp

    app.register_blueprint(create_api_blueprint())
    app.register_blueprint(redirects_bp)
    logger.info("API registered at /api with Swagger UI at /api/docs")


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Checks Redis, Celery, and blob storage availability.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
        "storage": "unknown",
    }

    # Check Redis connectivity
    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    # Check Celery availability
    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    # Check blob storage
    try:
        storage = app.container.resolve(IBlobStorage)
        if storage.health_check():
            health_status["storage"] = "available"
        else:
            health_status["storage"] = "unavailable"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["storage"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
