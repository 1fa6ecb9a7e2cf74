"""Custom exception hierarchy for the HR Portal access service.

Provides structured error types that the centralized error handler
translates into consistent JSON responses.
"""

from __future__ import annotations


class HRPortalError(Exception):
    """Base exception for all HR Portal errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An internal error occurred") -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(HRPortalError):
    """Invalid access table or service configuration."""

    status_code = 500
    error_type = "configuration_error"


class AccessDeniedError(HRPortalError):
    """The caller's roles do not satisfy a route guard.

    ``redirect_to`` is the landing page the client should navigate to.
    """

    status_code = 403
    error_type = "access_denied"

    def __init__(self, message: str = "Access denied", redirect_to: str | None = None) -> None:
        self.redirect_to = redirect_to
        super().__init__(message)


class BackendUnavailableError(HRPortalError):
    """The HR backend could not be reached."""

    status_code = 502
    error_type = "backend_unavailable"


class BackendTimeoutError(HRPortalError):
    """The HR backend did not answer in time."""

    status_code = 504
    error_type = "backend_timeout"

