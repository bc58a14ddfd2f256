"""
Custom Exception Classes for the Search Dashboard

This module defines the error taxonomy used across the application:

- ConfigurationError: fatal, raised while the application is being built
- AuthenticationError: a guarded API call without an authenticated session
- StorageUnavailableError: the record store could not answer a query

A failed login is never an exception; it is a ``None`` result from the
authenticator. Redirects to the login page travel as ``LoginRedirect``.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses."""

    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_FAILED = "AUTH_FAILED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DashboardError(Exception):
    """Base exception class for all dashboard errors"""

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
# Startup Exceptions
# ============================================================================


class ConfigurationError(DashboardError):
    """Raised when the application cannot be configured (missing admin credentials, bad env)"""

    def __init__(self, message: str = "Invalid configuration", problems: list[str] | None = None):
        details = {"problems": problems} if problems else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=ErrorCode.CONFIGURATION_INVALID,
        )


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthenticationError(DashboardError):
    """Raised when a guarded API route is called without an authenticated session"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=ErrorCode.AUTH_REQUIRED,
        )


class LoginRedirect(Exception):
    """Raised by page guards to send the browser to the login view"""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)


# ============================================================================
# Storage Exceptions
# ============================================================================


class StorageUnavailableError(DashboardError):
    """Raised when the record store fails to answer a query"""

    def __init__(
        self,
        message: str = "The record store is unavailable",
        operation: str | None = None,
        reason: str | None = None,
    ):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if reason:
            details["reason"] = reason
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code=ErrorCode.STORAGE_UNAVAILABLE,
        )
