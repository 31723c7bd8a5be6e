"""
Custom Exception Classes for Syncora

This module defines custom exceptions for consistent error responses
across the application. Every error carries a machine-readable
``error_code`` in addition to the HTTP status code.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the ``error_code`` field."""

    # Authentication
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_NOT_AUTHENTICATED = "AUTH_NOT_AUTHENTICATED"
    AUTH_INVALID_NONCE = "AUTH_INVALID_NONCE"
    AUTH_INVALID_2FA_TOKEN = "AUTH_INVALID_2FA_TOKEN"
    AUTH_2FA_NOT_CONFIGURED = "AUTH_2FA_NOT_CONFIGURED"
    AUTH_2FA_NOT_INITIALIZED = "AUTH_2FA_NOT_INITIALIZED"
    AUTH_2FA_ALREADY_ENABLED = "AUTH_2FA_ALREADY_ENABLED"
    AUTH_SESSION_FAILED = "AUTH_SESSION_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    # Resources and validation
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Infrastructure
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SyncoraError(Exception):
    """Base exception class for all Syncora errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthenticationError(SyncoraError):
    """Raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: ErrorCode = ErrorCode.AUTH_FAILED,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            error_code=error_code,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised for unknown emails, password-less accounts and wrong passwords alike"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)


class NotAuthenticatedError(AuthenticationError):
    """Raised when a request carries no valid session"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_NOT_AUTHENTICATED)


class InvalidOrExpiredNonceError(AuthenticationError):
    """Raised when a pending-authentication nonce is unknown, consumed or expired"""

    def __init__(self, message: str = "Invalid or expired nonce"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_NONCE)


class InvalidTwoFactorTokenError(AuthenticationError):
    """Raised when a one-time code does not match the user's secret"""

    def __init__(self, message: str = "Invalid 2FA token"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_2FA_TOKEN)


class TwoFactorNotConfiguredError(AuthenticationError):
    """Raised when a pending login refers to a user who no longer has 2FA configured"""

    def __init__(self, message: str = "2FA not configured"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_2FA_NOT_CONFIGURED)


class TwoFactorNotInitializedError(SyncoraError):
    """Raised when enrollment is confirmed before a secret was generated"""

    def __init__(self, message: str = "2FA not initialized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.AUTH_2FA_NOT_INITIALIZED,
        )


class TwoFactorAlreadyEnabledError(SyncoraError):
    """Raised when enrollment is requested while 2FA is already enforced"""

    def __init__(self, message: str = "2FA is already enabled. Disable it first to reconfigure."):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.AUTH_2FA_ALREADY_ENABLED,
        )


class SessionEstablishmentError(SyncoraError):
    """Raised when the session store cannot record a new session"""

    def __init__(self, message: str = "Login failed"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.AUTH_SESSION_FAILED,
        )


# ============================================================================
# Resource & Validation Exceptions
# ============================================================================


class ResourceNotFoundError(SyncoraError):
    """Raised when a resource is missing or belongs to another user"""

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        super().__init__(
            message=f"{resource_type} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
        )


class DuplicateResourceError(SyncoraError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, message: str = "User already exists"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


# ============================================================================
# Store & Upstream Service Exceptions
# ============================================================================


class UpstreamStoreError(SyncoraError):
    """Raised when the credential/data store is unreachable or errors"""

    def __init__(self, message: str = "A storage error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=ErrorCode.STORE_UNAVAILABLE,
        )


class ServiceError(SyncoraError):
    """Raised when an upstream service (OAuth provider, AI API) fails"""

    def __init__(self, message: str, service: str | None = None, status_code: int = status.HTTP_502_BAD_GATEWAY):
        details = {"service": service} if service else {}
        super().__init__(
            message=message,
            status_code=status_code,
            details=details,
            error_code=ErrorCode.SERVICE_UNAVAILABLE,
        )


class RateLimitExceededError(SyncoraError):
    """Raised when rate limit is exceeded"""

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
        )
