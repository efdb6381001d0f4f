"""
Booking platform client.

Session handling (token, claims, roles), route gating, a single HTTP
gateway and the reservation / provider workflows built on top of them.
"""

from .client import BookingClient
from .config import ClientConfig, configure_logging
from .errors import (
    ApiError,
    AuthError,
    BookingClientError,
    DraftValidationError,
    ProviderRequestStateError,
    ServerRejection,
    SubmissionInProgressError,
    TransportFailure,
)

__version__ = "0.3.0"

__all__ = [
    "BookingClient",
    "ClientConfig",
    "configure_logging",
    # Errors
    "ApiError",
    "AuthError",
    "BookingClientError",
    "DraftValidationError",
    "ProviderRequestStateError",
    "ServerRejection",
    "SubmissionInProgressError",
    "TransportFailure",
]
