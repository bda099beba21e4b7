"""
Service Exceptions
------------------
Exception hierarchy shared by the auth layer and the API.

Each class carries the HTTP status it maps to. The application registers a
single handler that renders any ServiceError as ``{"error": ..., "details": ...}``.
Plain input validation inside the database services still raises ValueError,
which endpoints translate to 400.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailedError(ServiceError):
    """Malformed or missing request input (400)."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Missing, invalid or expired credentials (401)."""

    status_code = 401


class AuthorizationError(ServiceError):
    """Valid identity with the wrong role (403)."""

    status_code = 403


class NotFoundError(ServiceError):
    """Referenced entity does not exist (404)."""

    status_code = 404


class RateLimitedError(ServiceError):
    """Too many attempts inside the rate limit window (429)."""

    status_code = 429


class ConfigurationError(ServiceError):
    """Server misconfiguration such as a missing signing secret (500)."""

    status_code = 500
