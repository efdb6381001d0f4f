"""
Booking workflows: reservation drafts, provider requests and the provider panel.
"""

from .draft import DraftLine, ReservationDraft, ReservationDraftValidator
from .reservation_form import ReservationForm
from .provider_request import (
    Action,
    ProviderRequestReview,
    ProviderRequestState,
    ProviderRequestTracker,
)
from .provider_panel import ProviderPanel
from .forms import validate_branch, validate_registration, validate_room

__all__ = [
    # Reservations
    "DraftLine",
    "ReservationDraft",
    "ReservationDraftValidator",
    "ReservationForm",
    # Provider requests
    "Action",
    "ProviderRequestReview",
    "ProviderRequestState",
    "ProviderRequestTracker",
    # Provider panel
    "ProviderPanel",
    "validate_branch",
    "validate_registration",
    "validate_room",
]
