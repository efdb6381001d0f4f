"""
Persistent session store.

Holds the bearer token, display name, role list and numeric user id in a
single JSON document so that a clear removes all four fields at once.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger


TOKEN_KEY = "token"
USERNAME_KEY = "username"
ROLES_KEY = "roles"
USER_ID_KEY = "userId"


class TokenStore:
    """
    File-backed key/value store for the current session.

    The whole document is rewritten on every change (temp file + rename),
    so readers never observe a half-written session. No expiry is enforced
    here; an expired token is only discovered when the server rejects it.
    """

    def __init__(self, token_file: Path):
        """
        Initialize store.

        Args:
            token_file: Path to the session file (created on first write)
        """
        self.token_file = Path(token_file)
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.token_file.exists():
            return {}

        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load session from {self.token_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed session file {self.token_file}")
            return {}
        return data

    def reload(self) -> None:
        """Re-read the session file, dropping the in-memory copy."""
        self._data = self._load()

    def _flush(self) -> None:
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.token_file.with_name(self.token_file.name + ".tmp")

        with open(tmp_file, "w") as f:
            json.dump(self._data, f, indent=2)
        tmp_file.chmod(0o600)  # rw-------
        os.replace(tmp_file, self.token_file)

    # ========================================================================
    # Token
    # ========================================================================

    def get(self) -> Optional[str]:
        """Current bearer token, or None."""
        return self._data.get(TOKEN_KEY) or None

    def set(self, token: str) -> None:
        self._data[TOKEN_KEY] = token
        self._flush()
        logger.debug(f"Token stored ({len(token)} chars)")

    def clear(self) -> None:
        """Remove token, username, roles and user id together."""
        self._data = {}
        if self.token_file.exists():
            self.token_file.unlink()
        logger.debug("Session store cleared")

    # ========================================================================
    # Cached identity fields
    # ========================================================================

    def get_username(self) -> Optional[str]:
        return self._data.get(USERNAME_KEY) or None

    def set_username(self, username: str) -> None:
        self._data[USERNAME_KEY] = username
        self._flush()

    def get_roles(self) -> List[str]:
        roles = self._data.get(ROLES_KEY)
        if not isinstance(roles, list):
            return []
        return [r for r in roles if isinstance(r, str)]

    def set_roles(self, roles: List[str]) -> None:
        self._data[ROLES_KEY] = list(roles)
        self._flush()

    def get_user_id(self) -> Optional[int]:
        user_id = self._data.get(USER_ID_KEY)
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        return user_id

    def set_user_id(self, user_id: int) -> None:
        self._data[USER_ID_KEY] = user_id
        self._flush()

    def save(
        self,
        token: str,
        username: str,
        roles: List[str],
        user_id: Optional[int] = None,
    ) -> None:
        """
        Replace the whole session in one write.

        Args:
            token: Bearer token
            username: Display name
            roles: Role authorities to cache
            user_id: Numeric user id, omitted if unknown
        """
        data: Dict[str, Any] = {
            TOKEN_KEY: token,
            USERNAME_KEY: username,
            ROLES_KEY: list(roles),
        }
        if user_id is not None:
            data[USER_ID_KEY] = user_id

        self._data = data
        self._flush()
        logger.info(f"Session saved to {self.token_file}")
