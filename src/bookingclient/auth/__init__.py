"""
Client-side identity for the booking platform.

Token persistence, unverified claim extraction, derived session state and
route/affordance gating.
"""

from .token_store import TokenStore
from .claims import ClaimDecoder, UntrustedClaims, normalize_authority
from .session import ANONYMOUS, Session, SessionService, has_role
from .guard import (
    HOME_PATH,
    LOGIN_PATH,
    Affordance,
    AuthorizationGuard,
    Decision,
    Outcome,
    affordance,
    decide,
)

__all__ = [
    # Persistence
    "TokenStore",
    # Claims
    "ClaimDecoder",
    "UntrustedClaims",
    "normalize_authority",
    # Session
    "ANONYMOUS",
    "Session",
    "SessionService",
    "has_role",
    # Gating
    "HOME_PATH",
    "LOGIN_PATH",
    "Affordance",
    "AuthorizationGuard",
    "Decision",
    "Outcome",
    "affordance",
    "decide",
]
