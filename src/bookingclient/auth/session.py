"""
Session state derived from the token store and decoded claims.

One ``SessionService`` is constructed per process and handed to whatever
needs it (gateway, guard, forms). It is the only writer of the store.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from loguru import logger

from ..models import ROLE_PREFIX
from .claims import ClaimDecoder
from .token_store import TokenStore


@dataclass(frozen=True)
class Session:
    """
    Read-only snapshot of the current session.

    ``is_authenticated`` holds exactly when a token is present; ``roles``
    and ``user_id`` are only populated from a successfully decoded token.
    """
    token: Optional[str] = None
    username: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)
    user_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def has_role(self, name: str) -> bool:
        """True if ``name`` or ``ROLE_<name>`` is among the session roles."""
        return has_role(self.roles, name)


ANONYMOUS = Session()


def has_role(roles, name: str) -> bool:
    """
    Check a role set for ``name`` in either bare or prefixed form.

    Args:
        roles: Role authorities held by the user
        name: Role to look for (``"ADMIN"`` or ``"ROLE_ADMIN"``)
    """
    return name in roles or (ROLE_PREFIX + name) in roles


class SessionService:
    """
    Owns the login/logout lifecycle.

    The snapshot is recomputed on construction (reading what was persisted)
    and after every ``login``/``logout``; nothing else mutates it.

    Example:
        session = SessionService(TokenStore(path))
        session.login(token, "alice")
        if session.has_role("PROVIDER"): ...
    """

    def __init__(self, store: TokenStore, decoder: Optional[ClaimDecoder] = None):
        self.store = store
        self.decoder = decoder or ClaimDecoder()
        self._state = self._read_store()

    def _read_store(self) -> Session:
        token = self.store.get()
        if token is None:
            return ANONYMOUS

        return Session(
            token=token,
            username=self.store.get_username(),
            roles=frozenset(self.store.get_roles()),
            user_id=self.store.get_user_id(),
        )

    @property
    def state(self) -> Session:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def username(self) -> Optional[str]:
        return self._state.username

    @property
    def roles(self) -> FrozenSet[str]:
        return self._state.roles

    @property
    def user_id(self) -> Optional[int]:
        return self._state.user_id

    def has_role(self, name: str) -> bool:
        return self._state.has_role(name)

    def login(self, token: str, username: str) -> Session:
        """
        Start a session from a freshly issued token.

        If the token cannot be decoded the session is still authenticated,
        with no roles and no user id.

        Args:
            token: Token returned by the authentication service
            username: Name the user logged in with

        Returns:
            The new session snapshot
        """
        claims = self.decoder.decode(token)
        if claims is None:
            logger.warning(f"Logged in as {username} without readable claims; no roles granted")
            roles, user_id = [], None
        else:
            roles, user_id = list(claims.authorities), claims.user_id

        self.store.save(token, username, roles, user_id)
        self._state = self._read_store()

        logger.success(f"Logged in as {username} (roles: {', '.join(roles) or 'none'})")
        return self._state

    def logout(self) -> None:
        """Clear the store and reset every derived field."""
        username = self._state.username
        self.store.clear()
        self._state = ANONYMOUS
        logger.info(f"Logged out{f' {username}' if username else ''}")

    def reload(self) -> Session:
        """Re-read the persisted session (e.g. after another process wrote it)."""
        self.store.reload()
        self._state = self._read_store()
        return self._state
