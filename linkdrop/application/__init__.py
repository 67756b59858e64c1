"""
Application Layer

Use-case services orchestrating the domain: uploads, access and download
grants, identity and auth, plus dependency wiring and event publishing.
"""

from .artifact_service import ArtifactService
from .auth_service import AuthResult, AuthService
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .download_grant_service import DownloadGrant, DownloadGrantService
from .event_publisher import EventPublisher
from .identity_resolver import Identity, IdentityResolver
from .requests import DownloadRequest, UploadRequest
from .session_tokens import SESSION_COOKIE_NAME, SessionTokenService
from .upload_service import UploadResult, UploadService

__all__ = [
    "ArtifactService",
    "AuthResult",
    "AuthService",
    "DependencyContainer",
    "DependencyNotFoundError",
    "DownloadGrant",
    "DownloadGrantService",
    "DownloadRequest",
    "EventPublisher",
    "Identity",
    "IdentityResolver",
    "SESSION_COOKIE_NAME",
    "SessionTokenService",
    "UploadRequest",
    "UploadResult",
    "UploadService",
]
