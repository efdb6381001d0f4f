"""
Claim extraction from compact session tokens.

The payload segment is decoded WITHOUT verifying the signature. The token
was received straight from the authentication service, so its claims are
taken at face value for display and routing only. The backend re-validates
every request; nothing here is a security check.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

import jwt
from loguru import logger

from ..models import ROLE_PREFIX, Role


# ASCII digits only; int() rejects some strings str.isdigit() accepts
USER_ID_PATTERN = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class UntrustedClaims:
    """
    Claims read from an unverified token.

    Attributes:
        authorities: Role authorities, normalized to ``ROLE_<NAME>``
        user_id: Numeric user id, if the token carried one
    """
    authorities: Tuple[str, ...]
    user_id: Optional[int] = None


def normalize_authority(authority: str) -> str:
    """
    Bring a role claim to the canonical ``ROLE_<NAME>`` form.

    Known bare role names (``ADMIN``) get the prefix; anything already
    prefixed, or not a platform role, is returned unchanged.
    """
    authority = authority.strip()
    if authority.startswith(ROLE_PREFIX):
        return authority
    if authority in Role.__members__:
        return ROLE_PREFIX + authority
    return authority


def _parse_user_id(raw) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and USER_ID_PATTERN.fullmatch(raw.strip()):
        return int(raw)
    return None


class ClaimDecoder:
    """Decodes the middle segment of ``header.payload.signature`` tokens."""

    def decode(self, token: Optional[str]) -> Optional[UntrustedClaims]:
        """
        Extract role and user-id claims.

        Args:
            token: Compact token string

        Returns:
            UntrustedClaims, or None if the token cannot be decoded.
            Never raises.
        """
        if not token:
            return None

        segments = token.split(".")
        if len(segments) != 3:
            logger.warning(f"Cannot decode token: expected 3 segments, got {len(segments)}")
            return None

        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            logger.warning(f"Failed to decode token: {e}")
            return None

        raw_authorities = payload.get("authorities", [])
        if not isinstance(raw_authorities, list):
            logger.warning("Ignoring non-list 'authorities' claim")
            raw_authorities = []

        authorities = []
        for authority in raw_authorities:
            if not isinstance(authority, str):
                continue
            normalized = normalize_authority(authority)
            if normalized not in authorities:
                authorities.append(normalized)

        return UntrustedClaims(
            authorities=tuple(authorities),
            user_id=_parse_user_id(payload.get("userId")),
        )
