"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry the user-facing message and HTTP mapping.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    FILE_NOT_FOUND = "file_not_found"
    LINK_EXPIRED = "link_expired"
    INCORRECT_PASSWORD = "incorrect_password"
    SHORT_LINK_NOT_FOUND = "short_link_not_found"
    INVALID_REQUEST = "invalid_request"
    FILE_TOO_LARGE = "file_too_large"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INVALID_SIGNATURE = "invalid_signature"
    ACCOUNT_EXISTS = "account_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    UPLOAD_FAILED = "upload_failed"
    STORAGE_ERROR = "storage_error"
    PERSISTENCE_ERROR = "persistence_error"
    SYSTEM_ERROR = "system_error"


# User-facing messages. Internal detail never goes in here.
ERROR_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.FILE_NOT_FOUND: "File not found or link is invalid.",
    ErrorCategory.LINK_EXPIRED: "This link has expired.",
    ErrorCategory.INCORRECT_PASSWORD: "Incorrect password.",
    ErrorCategory.SHORT_LINK_NOT_FOUND: "URL not found.",
    ErrorCategory.INVALID_REQUEST: "The request is missing required information or contains invalid data.",
    ErrorCategory.FILE_TOO_LARGE: "The uploaded file exceeds the maximum allowed size.",
    ErrorCategory.UNAUTHORIZED: "Please log in or provide a guest identifier.",
    ErrorCategory.FORBIDDEN: "You are not allowed to modify this file.",
    ErrorCategory.INVALID_SIGNATURE: "This download link is invalid or has expired.",
    ErrorCategory.ACCOUNT_EXISTS: "An account with this email already exists.",
    ErrorCategory.INVALID_CREDENTIALS: "Invalid email or password.",
    ErrorCategory.UPLOAD_FAILED: "An error occurred during upload.",
    ErrorCategory.STORAGE_ERROR: "Server error.",
    ErrorCategory.PERSISTENCE_ERROR: "Server error.",
    ErrorCategory.SYSTEM_ERROR: "Server error.",
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ArtifactNotFoundError(DomainError):
    """Raised when no artifact record exists for an id."""
    pass


class ArtifactExpiredError(DomainError):
    """
    Raised when an artifact is past its expiry time or its download quota.

    Both conditions are reported identically to the caller.
    """
    pass


class IncorrectPasswordError(DomainError):
    """Raised when a password-protected artifact is accessed with a wrong or missing password."""
    pass


class ValidationError(DomainError):
    """Raised for malformed input (bad numbers, oversize uploads, empty files)."""

    def __init__(self, message: str, field: Optional[str] = None, too_large: bool = False):
        super().__init__(message)
        self.field = field
        self.too_large = too_large


class UpstreamStorageError(DomainError):
    """Raised when the blob store fails."""
    pass


class PersistenceError(DomainError):
    """Raised when metadata persistence fails."""
    pass


class ShortLinkNotFoundError(DomainError):
    """Raised when a short id does not resolve (unknown or past retention)."""
    pass


class AuthenticationError(DomainError):
    """Raised when a session token or account credential does not verify."""
    pass


class AccountExistsError(DomainError):
    """Raised when registering an email that is already taken."""
    pass


class OwnershipError(DomainError):
    """Raised when a caller tries to modify an artifact it does not own."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-facing message.

    Bridges domain errors to HTTP responses. Logging is done by the
    caller, not by this class.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}
        self.message = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.category.value,
            "message": self.message,
        }


def categorize_domain_error(error: DomainError) -> ErrorCategory:
    """Map a domain exception onto its user-facing category."""
    if isinstance(error, ArtifactNotFoundError):
        return ErrorCategory.FILE_NOT_FOUND
    if isinstance(error, ArtifactExpiredError):
        return ErrorCategory.LINK_EXPIRED
    if isinstance(error, IncorrectPasswordError):
        return ErrorCategory.INCORRECT_PASSWORD
    if isinstance(error, ShortLinkNotFoundError):
        return ErrorCategory.SHORT_LINK_NOT_FOUND
    if isinstance(error, ValidationError):
        return ErrorCategory.FILE_TOO_LARGE if error.too_large else ErrorCategory.INVALID_REQUEST
    if isinstance(error, AuthenticationError):
        return ErrorCategory.INVALID_CREDENTIALS
    if isinstance(error, AccountExistsError):
        return ErrorCategory.ACCOUNT_EXISTS
    if isinstance(error, OwnershipError):
        return ErrorCategory.FORBIDDEN
    if isinstance(error, UpstreamStorageError):
        return ErrorCategory.STORAGE_ERROR
    if isinstance(error, PersistenceError):
        return ErrorCategory.PERSISTENCE_ERROR
    return ErrorCategory.SYSTEM_ERROR


# HTTP status per category
STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.FILE_NOT_FOUND: 404,
    ErrorCategory.LINK_EXPIRED: 410,
    ErrorCategory.INCORRECT_PASSWORD: 401,
    ErrorCategory.SHORT_LINK_NOT_FOUND: 404,
    ErrorCategory.INVALID_REQUEST: 400,
    ErrorCategory.FILE_TOO_LARGE: 413,
    ErrorCategory.UNAUTHORIZED: 401,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.INVALID_SIGNATURE: 403,
    ErrorCategory.ACCOUNT_EXISTS: 409,
    ErrorCategory.INVALID_CREDENTIALS: 401,
    ErrorCategory.UPLOAD_FAILED: 500,
    ErrorCategory.STORAGE_ERROR: 500,
    ErrorCategory.PERSISTENCE_ERROR: 500,
    ErrorCategory.SYSTEM_ERROR: 500,
}


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details (not sent to the client)
        context: Additional context information
        status_code: HTTP status code, defaults to the category's mapping

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    if status_code is None:
        status_code = STATUS_CODES.get(category, 500)
    return error.to_dict(), status_code
