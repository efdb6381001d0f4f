"""
Error types for the booking client.

Every failure the client reports carries a human-readable ``message`` that
can be shown to the user as-is. Gateway failures all derive from
``ApiError`` so callers can catch a single type.
"""

from typing import Optional


class BookingClientError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DraftValidationError(BookingClientError):
    """
    Raised when form input is incomplete or malformed.

    Detected locally; the request is never sent.

    Attributes:
        field: Name of the offending form field, if attributable
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class ApiError(BookingClientError):
    """
    Raised for any failed call through the gateway.

    Attributes:
        status: HTTP status code, or None if no response was received
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class ServerRejection(ApiError):
    """Non-2xx response; message is the server's own text when it sent one."""


class AuthError(ServerRejection):
    """Credentials missing, invalid or expired (HTTP 401/403)."""


class TransportFailure(ApiError):
    """The request could not complete (connection, timeout, unreadable body)."""

    def __init__(self, message: str):
        super().__init__(message, status=None)


class SubmissionInProgressError(BookingClientError):
    """A submission is already in flight for this form."""


class ProviderRequestStateError(BookingClientError):
    """Action not allowed in the current provider-request state."""
