"""
Client configuration.

Defaults point at a local development stack; every value can be overridden
from the environment or from CLI flags.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger


DEFAULT_API_BASE_URL = "http://localhost:8080"    # API gateway
DEFAULT_AUTH_BASE_URL = "http://localhost:9000"   # Auth service, reached directly
DEFAULT_TIMEOUT = 15.0
DEFAULT_TOKEN_FILE = Path.home() / ".booking_client_session"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _strip_slash(url: str) -> str:
    return url.rstrip("/")


@dataclass
class ClientConfig:
    """
    Runtime settings for the booking client.

    Attributes:
        api_base_url: Gateway base URL (catalog, booking, admin routes)
        auth_base_url: Authentication service base URL (login, register)
        token_file: Where the session is persisted
        timeout: Total per-request timeout in seconds
        logout_on_unauthorized: Force logout on a 401 from an authenticated call
        log_level: Minimum level for the stderr sink
    """
    api_base_url: str = DEFAULT_API_BASE_URL
    auth_base_url: str = DEFAULT_AUTH_BASE_URL
    token_file: Path = field(default_factory=lambda: DEFAULT_TOKEN_FILE)
    timeout: float = DEFAULT_TIMEOUT
    logout_on_unauthorized: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.api_base_url = _strip_slash(self.api_base_url)
        self.auth_base_url = _strip_slash(self.auth_base_url)
        self.token_file = Path(self.token_file).expanduser()
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from ``BOOKING_*`` environment variables."""
        env = os.environ
        timeout_raw = env.get("BOOKING_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning(f"Ignoring invalid BOOKING_TIMEOUT={timeout_raw!r}")
            timeout = DEFAULT_TIMEOUT

        return cls(
            api_base_url=env.get("BOOKING_API_BASE_URL", DEFAULT_API_BASE_URL),
            auth_base_url=env.get("BOOKING_AUTH_BASE_URL", DEFAULT_AUTH_BASE_URL),
            token_file=Path(env.get("BOOKING_TOKEN_FILE", str(DEFAULT_TOKEN_FILE))),
            timeout=timeout,
            logout_on_unauthorized=env.get("BOOKING_LOGOUT_ON_401", "true").lower() in _TRUE_VALUES,
            log_level=env.get("BOOKING_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a single stderr sink at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
