"""
Route gating and role-dependent affordances.

Gating only decides where the user may go; the backend enforces access on
every call regardless of what is decided here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .session import Session, has_role


HOME_PATH = "/"
LOGIN_PATH = "/login"


class Outcome(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class Decision:
    """Result of a route check; ``path`` is set only for redirects."""
    outcome: Outcome
    path: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == Outcome.ALLOW

    @classmethod
    def allow(cls) -> "Decision":
        return cls(Outcome.ALLOW)

    @classmethod
    def redirect(cls, path: str) -> "Decision":
        return cls(Outcome.REDIRECT, path)


class Affordance(str, Enum):
    """Which management entry point to show. Purely presentational."""
    ADMIN = "admin"         # provider-request review
    PROVIDER = "provider"   # provider panel
    NEITHER = "neither"     # "become a provider" entry


def decide(
    is_authenticated: bool,
    roles: Iterable[str],
    required_role: Optional[str] = None,
    require_login: bool = False,
) -> Decision:
    """
    Decide whether a route may be shown.

    Args:
        is_authenticated: Whether a session token is present
        roles: Role authorities of the session
        required_role: Role the route needs, or None
        require_login: Route needs any authenticated session

    Returns:
        ALLOW, REDIRECT(home) for a missing role, or REDIRECT(login)
        for a login-only route visited anonymously
    """
    if required_role is not None:
        if not has_role(frozenset(roles), required_role):
            return Decision.redirect(HOME_PATH)
        return Decision.allow()

    if require_login and not is_authenticated:
        return Decision.redirect(LOGIN_PATH)

    return Decision.allow()


def affordance(roles: Iterable[str]) -> Affordance:
    """Pick exactly one affordance; ADMIN wins over PROVIDER."""
    roles = frozenset(roles)
    if has_role(roles, "ADMIN"):
        return Affordance.ADMIN
    if has_role(roles, "PROVIDER"):
        return Affordance.PROVIDER
    return Affordance.NEITHER


class AuthorizationGuard:
    """Applies ``decide``/``affordance`` to a live session."""

    def __init__(self, session):
        """
        Args:
            session: SessionService (or anything exposing ``state``)
        """
        self.session = session

    def _state(self) -> Session:
        return self.session.state

    def check(self, required_role: Optional[str] = None, require_login: bool = False) -> Decision:
        state = self._state()
        return decide(state.is_authenticated, state.roles, required_role, require_login)

    def affordance(self) -> Affordance:
        return affordance(self._state().roles)
